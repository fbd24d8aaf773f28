from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, Optional

from adaptive_signal.model.lanes import Lane, SignalAspect
from adaptive_signal.playback.state import PlaybackState


def _by_name(mapping: Dict[Lane, Any]) -> Dict[str, Any]:
    return {lane.name.lower(): value for lane, value in mapping.items()}


@dataclass
class TickResult:
    cycle_index: int
    readings: Dict[Lane, float]
    allocation: Dict[Lane, float]
    signal_state: Dict[Lane, SignalAspect]

    # [s] simulated
    elapsed_seconds: float
    # 0 = unbounded
    total_duration_seconds: float

    # diagnostics, not fed back into allocation
    efficiency: float = 0.0
    latency_ms: float = 0.0
    timestamp: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cycle_index": self.cycle_index,
            "readings": _by_name(self.readings),
            "allocation": _by_name(self.allocation),
            "signal_state": {k: v.value for k, v in _by_name(self.signal_state).items()},
            "elapsed_seconds": self.elapsed_seconds,
            "total_duration_seconds": self.total_duration_seconds,
            "efficiency": self.efficiency,
            "latency_ms": self.latency_ms,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


@dataclass(frozen=True)
class StatusSnapshot:
    state: PlaybackState
    cycle_count: int
    speed_multiplier: float
    elapsed_seconds: float
    total_duration_seconds: float
    remaining_seconds: float
    # percent of duration; None when unbounded
    progress: Optional[float]

    @property
    def is_running(self) -> bool:
        return self.state is PlaybackState.RUNNING

    @property
    def is_paused(self) -> bool:
        return self.state is PlaybackState.PAUSED


@dataclass
class SessionSummary:
    label: Optional[str]
    config: Dict[str, Any]

    wall_time_seconds: float
    cycles_completed: int
    final_state: PlaybackState
    elapsed_seconds: float

    avg_efficiency: float
    mean_allocation: Dict[Lane, float] = field(default_factory=dict)
    mean_readings: Dict[Lane, float] = field(default_factory=dict)
