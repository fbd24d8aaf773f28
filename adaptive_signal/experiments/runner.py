from dataclasses import replace
from typing import Iterable, List

import numpy as np

from adaptive_signal.clock import Clock, ManualClock
from adaptive_signal.config import SessionConfig
from adaptive_signal.io.sinks import CollectingSink
from adaptive_signal.metrics.timers import Timer
from adaptive_signal.metrics.types import SessionSummary
from adaptive_signal.model.controller import SignalController
from adaptive_signal.model.demand import DemandSource
from adaptive_signal.playback.scheduler import PlaybackScheduler, TickSink
from adaptive_signal.timers import get_timer
from adaptive_signal.timers.base_timer import TickTimer
from adaptive_signal.timers.timer_manual import ManualTimer


def build_scheduler(
    config: SessionConfig,
    sink: TickSink,
    clock: Clock | None = None,
    timer: TickTimer | None = None,
) -> PlaybackScheduler:
    """
    Wire demand sources, controller and scheduler from a SessionConfig.
    Each lane's source gets seed ``random_seed + lane index``.
    """
    controller = SignalController(config.controller)

    sources = {
        lane: DemandSource(
            lane,
            ema_coefficient=config.ema_coefficient,
            initial_density=config.initial_density,
            seed=config.random_seed + int(lane),
        )
        for lane in controller.lanes
    }

    if timer is None:
        TimerCls = get_timer(config.timer)
        timer = TimerCls()

    scheduler = PlaybackScheduler(
        sources,
        controller,
        sink,
        clock=clock,
        timer=timer,
        base_interval=config.base_interval,
    )
    scheduler.set_speed(config.speed_multiplier)
    return scheduler


def run_headless(config: SessionConfig, cycles: int) -> SessionSummary:
    """
    Run a session without real delays: a ManualClock is advanced by one
    tick interval before every tick. Stops after ``cycles`` ticks or when
    the configured duration is reached, whichever comes first.
    """
    clock = ManualClock()
    timer = ManualTimer()
    sink = CollectingSink()
    scheduler = build_scheduler(config, sink, clock=clock, timer=timer)

    with Timer() as t:
        scheduler.start(config.duration)
        for _ in range(cycles):
            clock.advance(scheduler.tick_interval)
            if timer.fire() == 0:
                break
        # let a bounded run notice its duration on the next tick
        if timer.active and config.duration > 0:
            clock.advance(scheduler.tick_interval)
            timer.fire()

    results = sink.results
    lanes = scheduler.controller.lanes
    if results:
        avg_eff = float(np.mean([r.efficiency for r in results]))
        mean_alloc = {lane: float(np.mean([r.allocation[lane] for r in results])) for lane in lanes}
        mean_read = {lane: float(np.mean([r.readings[lane] for r in results])) for lane in lanes}
    else:
        avg_eff, mean_alloc, mean_read = 0.0, {}, {}

    return SessionSummary(
        label=config.label,
        config=config.to_dict(),
        wall_time_seconds=t.elapsed,
        cycles_completed=scheduler.cycle_count,
        final_state=scheduler.state,
        elapsed_seconds=scheduler.elapsed_seconds,
        avg_efficiency=avg_eff,
        mean_allocation=mean_alloc,
        mean_readings=mean_read,
    )


def run_speed_sweep(
    base_config: SessionConfig,
    speeds: Iterable[float],
    cycles: int,
) -> List[SessionSummary]:
    """
    Helper: reruns the same headless session for each speed multiplier.
    """
    results: List[SessionSummary] = []
    for speed in speeds:
        cfg = replace(base_config, speed_multiplier=speed)
        results.append(run_headless(cfg, cycles))
    return results
