import abc
from datetime import datetime, timedelta, timezone


class Clock(abc.ABC):
    """
    Time source for anything doing expiry arithmetic. All values are naive UTC
    to match the DateTime columns they are compared against.
    """

    @abc.abstractmethod
    def now(self) -> datetime: ...


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)


class FrozenClock(Clock):
    """
    Clock that only moves when told to

        clock = FrozenClock(datetime(2025, 1, 1, 12))
        clock.advance(minutes=11)
    """

    def __init__(self, at: datetime | None = None):
        self._now = at or SystemClock().now()

    def now(self) -> datetime:
        return self._now

    def set(self, at: datetime) -> None:
        self._now = at

    def advance(self, **delta: float) -> datetime:
        self._now = self._now + timedelta(**delta)
        return self._now
