from abc import ABC, abstractmethod
from typing import Callable, Optional


TickCallback = Callable[[], None]


class TickTimer(ABC):
    """
    Abstract periodic timer (thread-backed, manual).
    start() replaces any running schedule; cancel() stops it for good.
    """

    name: str = "base"

    def __init__(self) -> None:
        self.interval: Optional[float] = None
        self._callback: Optional[TickCallback] = None

    @property
    @abstractmethod
    def active(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def start(self, interval: float, callback: TickCallback) -> None:
        """
        Begin calling ``callback`` every ``interval`` seconds.
        """
        raise NotImplementedError

    @abstractmethod
    def cancel(self) -> None:
        raise NotImplementedError
