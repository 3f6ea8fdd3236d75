"""Clock and per-request deadline."""
import time
from datetime import datetime, timezone

from charging_core.errors import DeadlineExceeded


def utcnow() -> datetime:
    """Naive UTC now; timestamps are stored naive-UTC (SQLite drops tzinfo)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Deadline:
    """Monotonic deadline for one unit of work."""

    __slots__ = ("_expires_at",)

    def __init__(self, seconds: float) -> None:
        self._expires_at = time.monotonic() + max(0.0, seconds)

    def remaining(self) -> float:
        """Seconds left, never negative."""
        return max(0.0, self._expires_at - time.monotonic())

    def expired(self) -> bool:
        return time.monotonic() >= self._expires_at

    def check(self, step: str) -> None:
        """Raise DeadlineExceeded if the deadline has passed."""
        if self.expired():
            raise DeadlineExceeded(f"deadline exceeded during {step}")
