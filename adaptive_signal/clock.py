import time
from abc import ABC, abstractmethod
from datetime import datetime, timedelta


class Clock(ABC):
    """
    Time source for the scheduler and demand sources.
    monotonic() drives elapsed-time accounting; now() feeds time-of-day bias.
    """

    @abstractmethod
    def monotonic(self) -> float:
        raise NotImplementedError

    @abstractmethod
    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    def monotonic(self) -> float:
        return time.monotonic()

    def now(self) -> datetime:
        return datetime.now()


class ManualClock(Clock):
    """Clock that only moves when advance() is called."""

    def __init__(self, start: datetime | None = None) -> None:
        self._start = start or datetime(2024, 1, 1, 12, 0, 0)
        self._offset = 0.0

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("ManualClock can't go backwards")
        self._offset += seconds

    def monotonic(self) -> float:
        return self._offset

    def now(self) -> datetime:
        return self._start + timedelta(seconds=self._offset)
