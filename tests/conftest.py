from datetime import datetime

import pytest

from adaptive_signal.clock import ManualClock
from adaptive_signal.config import ControllerConfig
from adaptive_signal.io.sinks import CollectingSink
from adaptive_signal.model.controller import SignalController
from adaptive_signal.model.demand import DemandSource
from adaptive_signal.model.lanes import Lane
from adaptive_signal.playback.scheduler import PlaybackScheduler
from adaptive_signal.timers.timer_manual import ManualTimer


class StubRng:
    """Feeds fixed uniform draws to a DemandSource."""

    def __init__(self, values):
        self._values = list(values)

    def random(self):
        return self._values.pop(0)


@pytest.fixture
def clock():
    return ManualClock(datetime(2024, 3, 5, 12, 0, 0))


@pytest.fixture
def timer():
    return ManualTimer()


@pytest.fixture
def sink():
    return CollectingSink()


@pytest.fixture
def controller():
    return SignalController(ControllerConfig(
        cycle_length=100, min_green=5, max_green=60, yellow_time=3, all_red_time=2,
    ))


@pytest.fixture
def sources():
    return {lane: DemandSource(lane, seed=100 + int(lane)) for lane in Lane}


@pytest.fixture
def scheduler(sources, controller, sink, clock, timer):
    return PlaybackScheduler(
        sources, controller, sink, clock=clock, timer=timer, base_interval=2.0,
    )


def tick(scheduler, clock, timer, times=1):
    """Advance the clock by one interval and deliver a tick, ``times`` times."""
    fired = 0
    for _ in range(times):
        clock.advance(scheduler.tick_interval)
        fired += timer.fire()
    return fired
