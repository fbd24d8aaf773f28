from typing import Dict, Type

from adaptive_signal.timers.base_timer import TickTimer
from adaptive_signal.timers.timer_manual import ManualTimer
from adaptive_signal.timers.timer_thread import ThreadTimer


TIMERS: Dict[str, Type[TickTimer]] = {
    ThreadTimer.name: ThreadTimer,
    ManualTimer.name: ManualTimer,
}


def get_timer(name: str) -> Type[TickTimer]:
    try:
        return TIMERS[name]
    except KeyError:
        raise ValueError(
            f"Unknown timer '{name}'. Available: {', '.join(TIMERS.keys())}"
        )
