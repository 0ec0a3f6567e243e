from __future__ import annotations

from dataclasses import dataclass

from xdg_notify.observability import get_logger
from xdg_notify.protocol.constants import MINIMUM_TIMEOUT_MS, NEVER_EXPIRE

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class TimeoutPolicy:
    """Maps a requested ``Notify`` timeout onto the delay before the server closes it.

    ``0`` never expires, a negative value means "server default" which is the
    minimum, and positive values below the minimum are raised to it.
    """

    minimum_ms: int = MINIMUM_TIMEOUT_MS

    def __post_init__(self) -> None:
        if self.minimum_ms <= 0:
            msg = "minimum_ms must be positive"
            raise ValueError(msg)

    def resolve(self, requested_ms: int) -> int | None:
        """Return the auto-close delay in milliseconds, or ``None`` to never close."""
        if requested_ms == NEVER_EXPIRE:
            logger.debug("auto_close_disabled")
            return None
        if requested_ms < 0:
            logger.debug("timeout_default_applied", delay_ms=self.minimum_ms)
            return self.minimum_ms
        if requested_ms < self.minimum_ms:
            logger.warning("timeout_below_minimum", requested_ms=requested_ms, delay_ms=self.minimum_ms)
            return self.minimum_ms
        return requested_ms
