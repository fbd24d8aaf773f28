from typing import List

from adaptive_signal.io.logging_utils import logger
from adaptive_signal.metrics.types import TickResult


class LoggingSink:
    """Tick sink that writes a one-line summary of every cycle to the log."""

    def __call__(self, result: TickResult) -> None:
        greens = ", ".join(
            f"{lane.name[0]}={green:.0f}s" for lane, green in result.allocation.items()
        )
        active = next(
            (lane.name for lane, aspect in result.signal_state.items() if aspect == "active"),
            "-",
        )
        total = f"{result.total_duration_seconds:.0f}s" if result.total_duration_seconds else "inf"
        logger.info(
            f"Cycle {result.cycle_index}: green [{greens}] active={active} "
            f"eff={result.efficiency:.1f}% t={result.elapsed_seconds:.1f}/{total}"
        )


class CollectingSink:
    """Keeps every result in memory; used by headless runs."""

    def __init__(self) -> None:
        self.results: List[TickResult] = []

    def __call__(self, result: TickResult) -> None:
        self.results.append(result)
