from adaptive_signal.timers.base_timer import TickTimer, TickCallback


class ManualTimer(TickTimer):
    """
    Timer that never fires on its own; fire() delivers ticks.
    Pair it with ManualClock for deterministic runs and tests.
    """

    name = "manual"

    def __init__(self) -> None:
        super().__init__()
        self._active = False
        self.starts = 0

    @property
    def active(self) -> bool:
        return self._active

    def start(self, interval: float, callback: TickCallback) -> None:
        self.interval = interval
        self._callback = callback
        self._active = True
        self.starts += 1

    def cancel(self) -> None:
        self._active = False

    def fire(self, times: int = 1) -> int:
        """
        Deliver up to ``times`` ticks; stops early if the callback cancels.
        :return: number of ticks delivered
        """
        fired = 0
        for _ in range(times):
            if not self._active or self._callback is None:
                break
            self._callback()
            fired += 1
        return fired
