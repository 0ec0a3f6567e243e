from tests.test_utils.fakes.bus import (
    SERVICE_UNKNOWN,
    InMemoryBus,
    InMemoryTransport,
    QueueSubscription,
    RecordedCall,
    RecordingEmitter,
    ScriptedTransport,
)
from tests.test_utils.fakes.handlers import FailingHandler, RecordingHandler

__all__ = [
    "SERVICE_UNKNOWN",
    "FailingHandler",
    "InMemoryBus",
    "InMemoryTransport",
    "QueueSubscription",
    "RecordedCall",
    "RecordingEmitter",
    "RecordingHandler",
    "ScriptedTransport",
]
