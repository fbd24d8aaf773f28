from dataclasses import dataclass, asdict, field
import math
from typing import Literal, Optional

from adaptive_signal.errors import InvalidConfiguration


TimerName = Literal["thread", "manual"]


def _is_number(value) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


@dataclass(frozen=True)
class ControllerConfig:
    # [s] full cycle, overhead included
    cycle_length: float = 60.0
    # [s] per-lane green bounds
    min_green: float = 10.0
    max_green: float = 60.0
    # [s] fixed overhead per lane
    yellow_time: float = 3.0
    all_red_time: float = 2.0

    def overhead(self, lane_count: int) -> float:
        return lane_count * (self.yellow_time + self.all_red_time)

    def available_time(self, lane_count: int) -> float:
        """Green time left to distribute after yellow/all-red overhead."""
        return self.cycle_length - self.overhead(lane_count)

    def validate(self, lane_count: int) -> None:
        """
        :raises InvalidConfiguration: when any field is not a positive number,
            min_green >= max_green, or the cycle can't fit min_green plus
            overhead for every lane.
        """
        for name, value in self.to_dict().items():
            if not _is_number(value) or value <= 0:
                raise InvalidConfiguration(
                    f"{name} must be a positive number, got {value!r}"
                )

        if self.min_green >= self.max_green:
            raise InvalidConfiguration(
                f"min_green ({self.min_green}) must be less than "
                f"max_green ({self.max_green})"
            )

        needed = self.overhead(lane_count) + lane_count * self.min_green
        if needed > self.cycle_length:
            raise InvalidConfiguration(
                f"Cycle too short: {self.cycle_length}s. Need at least {needed}s."
            )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SessionConfig:
    # [s] wall time between ticks at 1x speed
    base_interval: float = 2.0
    speed_multiplier: float = 1.0
    # [s] simulated; 0 = unbounded
    duration: float = 0.0

    timer: TimerName = "thread"
    random_seed: int = 42

    # demand sources
    ema_coefficient: float = 0.7
    initial_density: float = 50.0

    controller: ControllerConfig = field(default_factory=ControllerConfig)

    # scenario desc
    label: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)
