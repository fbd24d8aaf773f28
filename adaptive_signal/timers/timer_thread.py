import threading
from typing import Optional

from adaptive_signal.io.logging_utils import logger
from adaptive_signal.timers.base_timer import TickTimer, TickCallback


class ThreadTimer(TickTimer):
    """
    Real-time timer backed by one daemon thread.
    Each schedule owns its own stop event, so a cancelled worker
    can't deliver another tick after cancel() returns.
    """

    name = "thread"

    def __init__(self) -> None:
        super().__init__()
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        with self._lock:
            return self._thread is not None and self._thread.is_alive() \
                and not self._stop_event.is_set()

    def start(self, interval: float, callback: TickCallback) -> None:
        if interval <= 0:
            raise ValueError(f"Timer interval must be positive, got {interval}")

        self.cancel()

        with self._lock:
            self.interval = interval
            self._callback = callback
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(interval, callback, stop_event),
                name="adaptive-signal-timer",
                daemon=True,
            )
            self._stop_event = stop_event
            self._thread = thread
            thread.start()

    def cancel(self) -> None:
        with self._lock:
            stop_event = self._stop_event
            self._thread = None
            self._stop_event = None

        # no join: the worker may be blocked on its owner while cancel() runs
        if stop_event is not None:
            stop_event.set()

    @staticmethod
    def _run(interval: float, callback: TickCallback, stop_event: threading.Event) -> None:
        while not stop_event.wait(interval):
            try:
                callback()
            except Exception:
                # keep ticking; the owner decides what a failed tick means
                logger.exception("Unhandled error in timer callback")
