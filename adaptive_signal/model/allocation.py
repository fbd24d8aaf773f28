from __future__ import annotations

import math
from typing import Dict, Iterable, Mapping, Sequence, Tuple

import numpy as np

from adaptive_signal.config import ControllerConfig
from adaptive_signal.errors import InvalidConfiguration, InvalidInput, ProgrammingGuard
from .lanes import Lane, ALL_LANES


Allocation = Dict[Lane, float]

# float noise allowed when comparing sums against available time
_EPS = 1e-9


class AllocationEngine:
    """
    Proportional green-time allocation:
    1) split available time by share of total demand
    2) floor and clamp into [min_green, max_green]
    3) walk lanes by descending demand, moving one unit at a time,
       until the sum matches available time or nothing can move

    Stateless; the lane set is fixed at construction.
    """

    def __init__(self, lanes: Iterable[Lane] = ALL_LANES) -> None:
        self.lanes: Tuple[Lane, ...] = tuple(lanes)

    # ------------------------ PUBLIC API ------------------------

    def allocate(self, readings: Mapping[Lane, float], config: ControllerConfig) -> Allocation:
        """
        :param readings: lane -> demand in [0, 100]
        :param config: validated controller config
        :return: lane -> green seconds, in lane order
        """
        densities = self._as_array(readings)

        try:
            config.validate(len(self.lanes))
        except InvalidConfiguration as exc:
            raise ProgrammingGuard(f"Allocation run against invalid config: {exc}") from exc

        total = float(densities.sum())
        if total == 0.0:
            return {lane: config.min_green for lane in self.lanes}

        available = config.available_time(len(self.lanes))

        raw = densities / total * available
        constrained = np.clip(np.floor(raw), config.min_green, config.max_green)

        # stable sort keeps lane order for equal demand
        order = np.argsort(-densities, kind="stable")
        green = self._redistribute(constrained, available, order, config)

        return {lane: float(green[i]) for i, lane in enumerate(self.lanes)}

    def efficiency(
        self,
        readings: Mapping[Lane, float],
        allocation: Mapping[Lane, float],
        cycle_length: float,
    ) -> float:
        """
        How closely green share tracks demand, 0..100.
        Per lane: min(d, g) / max(d, g) with d = reading/100, g = green/cycle.
        """
        densities = self._as_array(readings)
        green = np.array([float(allocation[lane]) for lane in self.lanes], dtype=np.float64)

        density_ratio = densities / 100.0
        green_ratio = green / float(cycle_length)

        hi = np.maximum(density_ratio, green_ratio)
        lo = np.minimum(density_ratio, green_ratio)
        # both zero counts as a perfect match
        alignment = np.divide(lo, hi, out=np.ones_like(hi), where=hi > 0)

        return float(alignment.mean() * 100.0)

    # ------------------------ INTERNAL LOGIC ------------------------

    def _as_array(self, readings: Mapping[Lane, float]) -> np.ndarray:
        if not isinstance(readings, Mapping):
            raise InvalidInput("Readings must be a mapping of lane -> demand")

        if set(readings.keys()) != set(self.lanes):
            expected = ", ".join(l.name for l in self.lanes)
            got = ", ".join(str(k) for k in readings.keys())
            raise InvalidInput(f"Reading lanes [{got}] don't match configured lanes [{expected}]")

        values = []
        for lane in self.lanes:
            v = readings[lane]
            if isinstance(v, bool) or not isinstance(v, (int, float, np.number)):
                raise InvalidInput(f"Reading for {lane.name} is not numeric: {v!r}")
            v = float(v)
            if not math.isfinite(v) or v < 0.0:
                raise InvalidInput(f"Reading for {lane.name} must be finite and >= 0, got {v!r}")
            values.append(v)

        return np.array(values, dtype=np.float64)

    @staticmethod
    def _redistribute(
        green: np.ndarray,
        target: float,
        order: Sequence[int],
        config: ControllerConfig,
    ) -> np.ndarray:
        green = green.copy()
        diff = target - float(green.sum())

        while abs(diff) > _EPS:
            moved = False
            for idx in order:
                if abs(diff) <= _EPS:
                    break
                # whole units, or the fractional remainder when smaller
                step = math.copysign(min(1.0, abs(diff)), diff)
                new_value = green[idx] + step
                if config.min_green <= new_value <= config.max_green:
                    green[idx] = new_value
                    diff -= step
                    moved = True

            # every lane pinned at a bound; leave the remainder unresolved
            if not moved:
                break

        return green
