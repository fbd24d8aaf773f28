from dataclasses import replace, fields
from typing import Dict, Iterable, Mapping

from adaptive_signal.config import ControllerConfig
from adaptive_signal.errors import InvalidConfiguration
from adaptive_signal.io.logging_utils import logger
from .allocation import AllocationEngine, Allocation
from .lanes import Lane, SignalAspect, ALL_LANES


class SignalController:
    """
    Adaptive controller for a single intersection:
    - keeps the active timing config (validated on every change)
    - turns demand readings into green times via AllocationEngine
    - picks which lane shows green for the cycle
    """

    def __init__(
        self,
        config: ControllerConfig | None = None,
        lanes: Iterable[Lane] = ALL_LANES,
    ) -> None:
        self.engine = AllocationEngine(lanes)
        config = config or ControllerConfig()
        config.validate(len(self.engine.lanes))
        self._config = config

    @property
    def lanes(self):
        return self.engine.lanes

    @property
    def config(self) -> ControllerConfig:
        return self._config

    def update_config(self, **changes) -> ControllerConfig:
        """
        Apply a partial update. Either every change is applied or none:
        on failure the previous config stays active.

        :raises InvalidConfiguration: unknown field or invariant violation
        """
        known = {f.name for f in fields(ControllerConfig)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise InvalidConfiguration(f"Unknown config fields: {', '.join(unknown)}")

        candidate = replace(self._config, **changes)
        candidate.validate(len(self.lanes))

        self._config = candidate
        logger.info(f"Controller config updated: {candidate.to_dict()}")
        return candidate

    def compute_green_times(self, readings: Mapping[Lane, float]) -> Allocation:
        return self.engine.allocate(readings, self._config)

    def efficiency(self, readings: Mapping[Lane, float], allocation: Mapping[Lane, float]) -> float:
        return self.engine.efficiency(readings, allocation, self._config.cycle_length)

    def signal_state(self, allocation: Mapping[Lane, float]) -> Dict[Lane, SignalAspect]:
        """
        :param allocation: lane -> green seconds
        :return: lane -> ACTIVE for the largest allocation, INACTIVE otherwise
        """
        # max() keeps the first lane on ties, so lane order breaks them
        active = max(self.lanes, key=lambda lane: allocation[lane])
        return {
            lane: SignalAspect.ACTIVE if lane == active else SignalAspect.INACTIVE
            for lane in self.lanes
        }
