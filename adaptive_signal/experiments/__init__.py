from adaptive_signal.config import SessionConfig, ControllerConfig
from adaptive_signal.experiments.runner import build_scheduler, run_headless, run_speed_sweep


__all__ = [
    "SessionConfig",
    "ControllerConfig",
    "build_scheduler",
    "run_headless",
    "run_speed_sweep",
]
