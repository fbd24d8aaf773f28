from __future__ import annotations

import math
import random
from datetime import datetime
from typing import Dict, Optional

from adaptive_signal.errors import InvalidConfiguration, InvalidInput
from .lanes import Lane, parse_lane


BASE_DENSITY = 50.0
DENSITY_STD_DEV = 15.0
DEFAULT_DENSITY = 50.0

PEAK_FACTOR = 1.5
NIGHT_FACTOR = 0.3


def _clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, value))


class DemandSource:
    """
    Statistical stand-in for a lane density sensor.

    Each sample draws a Gaussian reading around BASE_DENSITY, biases it by
    time of day and smooths it with an exponential moving average so the
    controller doesn't see abrupt swings. A manual override replaces the
    generated value as the smoothing target.
    """

    def __init__(
        self,
        lane,
        ema_coefficient: float = 0.7,
        initial_density: float = DEFAULT_DENSITY,
        rng: random.Random | None = None,
        seed: int | None = None,
    ) -> None:
        try:
            self.lane: Lane = parse_lane(lane)
        except ValueError as exc:
            raise InvalidConfiguration(str(exc)) from exc

        if isinstance(ema_coefficient, bool) or not isinstance(ema_coefficient, (int, float)) \
                or not 0.0 <= ema_coefficient <= 1.0:
            raise InvalidConfiguration(
                f"EMA coefficient must be between 0 and 1, got {ema_coefficient!r}"
            )

        self.ema_coefficient = float(ema_coefficient)
        self.last_density: float = _clamp_percent(float(initial_density))
        self.override_density: Optional[float] = None
        self._smoothed: Optional[float] = None

        self.rng = rng if rng is not None else random.Random(seed)

    # ------------------------ PUBLIC API ------------------------

    @staticmethod
    def peak_factor(instant: datetime) -> float:
        """
        Time-of-day bias:
        - 07:00-09:59 and 17:00-19:59 -> rush hour
        - 22:00-05:59 -> night
        """
        hour = instant.hour
        if 7 <= hour <= 9 or 17 <= hour <= 19:
            return PEAK_FACTOR
        if hour >= 22 or hour <= 5:
            return NIGHT_FACTOR
        return 1.0

    def generate_density(self, instant: datetime) -> float:
        """
        Produce one smoothed reading in [0, 100] for the given instant.
        """
        generated = _clamp_percent(
            self._gaussian(BASE_DENSITY, DENSITY_STD_DEV) * self.peak_factor(instant)
        )

        if self.override_density is not None:
            target = self.override_density
        else:
            target = generated

        if self._smoothed is None:
            self._smoothed = target
        else:
            self._smoothed += self.ema_coefficient * (target - self._smoothed)

        self.last_density = _clamp_percent(self._smoothed)
        return self.last_density

    def set_override(self, value: float | None) -> None:
        """
        Pin the reading to ``value`` (clamped to [0, 100]); None clears it.
        The smoothing accumulator jumps straight to the override.
        """
        if value is None:
            self.clear_override()
            return

        if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
            raise InvalidInput(f"Override must be a number, got {value!r}")

        percent = _clamp_percent(float(value))
        self.override_density = percent
        self.last_density = percent
        self._smoothed = percent

    def clear_override(self) -> None:
        self.override_density = None

    def reset(self) -> None:
        self.override_density = None
        self.last_density = DEFAULT_DENSITY
        self._smoothed = None

    def metadata(self) -> Dict[str, object]:
        return {
            "lane": self.lane.name.lower(),
            "last_density": round(self.last_density, 2),
            "ema_coefficient": self.ema_coefficient,
            "has_override": self.override_density is not None,
        }

    # ------------------------ INTERNAL LOGIC ------------------------

    def _gaussian(self, mean: float, std_dev: float) -> float:
        # Box-Muller; u1 in (0, 1] so log() is defined
        u1 = 1.0 - self.rng.random()
        u2 = self.rng.random()
        z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        return mean + std_dev * z
