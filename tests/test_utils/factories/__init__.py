from tests.test_utils.factories.notification import NotificationFactory, NotifyRequestFactory

__all__ = [
    "NotificationFactory",
    "NotifyRequestFactory",
]
