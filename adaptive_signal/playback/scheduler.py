from __future__ import annotations

import math
import threading
from typing import Callable, Dict, Mapping, Optional

from adaptive_signal.clock import Clock, SystemClock
from adaptive_signal.config import ControllerConfig
from adaptive_signal.errors import InvalidInput, InvalidStateTransition
from adaptive_signal.io.logging_utils import logger
from adaptive_signal.metrics.timers import Timer
from adaptive_signal.metrics.types import TickResult, StatusSnapshot
from adaptive_signal.model.controller import SignalController
from adaptive_signal.model.demand import DemandSource
from adaptive_signal.model.lanes import Lane, parse_lane
from adaptive_signal.playback.state import PlaybackState, TRANSITIONS
from adaptive_signal.timers.base_timer import TickTimer
from adaptive_signal.timers.timer_thread import ThreadTimer


TickSink = Callable[[TickResult], None]
ErrorHandler = Callable[[BaseException], None]


def _check_number(value, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidInput(f"{what} must be a finite number, got {value!r}")
    return float(value)


class PlaybackScheduler:
    """
    Drives the control loop: one tick = sample every demand source,
    allocate green time, emit a TickResult to the sink.

    States: IDLE -> RUNNING <-> PAUSED -> STOPPED, reset() goes back to IDLE.

    Elapsed simulated time is accumulated in segments: each RUNNING
    segment contributes (wall time) * (speed during that segment), so
    pauses are not credited and speed changes don't rescale the past.

    Every public operation and every timer tick runs under one lock.
    Each schedule gets a generation number; ticks from an older
    generation are dropped, so a cancelled or rescheduled timer can't
    mutate state.
    """

    def __init__(
        self,
        sources: Mapping[Lane, DemandSource],
        controller: SignalController,
        sink: TickSink,
        clock: Clock | None = None,
        timer: TickTimer | None = None,
        base_interval: float = 2.0,
        on_error: ErrorHandler | None = None,
    ) -> None:
        if set(sources.keys()) != set(controller.lanes):
            raise InvalidInput("Demand sources must cover exactly the controller lanes")
        if base_interval <= 0:
            raise InvalidInput(f"base_interval must be positive, got {base_interval}")

        self.sources: Dict[Lane, DemandSource] = {lane: sources[lane] for lane in controller.lanes}
        self.controller = controller
        self.sink = sink
        self.clock = clock or SystemClock()
        self.timer = timer or ThreadTimer()
        self.base_interval = float(base_interval)
        self.on_error = on_error

        self._lock = threading.RLock()
        self._generation = 0

        self._state = PlaybackState.IDLE
        self._speed = 1.0
        self._duration = 0.0
        self._cycle_count = 0

        # simulated seconds banked before the current RUNNING segment
        self._elapsed_base = 0.0
        # clock.monotonic() when the current RUNNING segment began
        self._segment_start: Optional[float] = None
        self._elapsed = 0.0

        self.last_error: Optional[BaseException] = None

    # ------------------------ PROPERTIES ------------------------

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    @property
    def elapsed_seconds(self) -> float:
        return self._elapsed

    @property
    def speed_multiplier(self) -> float:
        return self._speed

    @property
    def total_duration(self) -> float:
        return self._duration

    @property
    def tick_interval(self) -> float:
        """Wall seconds between ticks at the current speed."""
        return self.base_interval / self._speed

    # ------------------------ PLAYBACK CONTROL ------------------------

    def start(self, duration_seconds: float = 0.0) -> None:
        """
        Start a fresh run, or resume if paused.

        :param duration_seconds: simulated seconds before auto-stop; 0 = unbounded
        """
        with self._lock:
            if self._state is PlaybackState.PAUSED:
                self.resume()
                return
            if self._state is PlaybackState.RUNNING:
                logger.info("Scheduler already running")
                return

            duration = _check_number(duration_seconds, "Duration")
            if duration < 0:
                raise InvalidInput(f"Duration can't be negative, got {duration}")

            self._duration = duration
            self._cycle_count = 0
            self._elapsed_base = 0.0
            self._elapsed = 0.0
            self._segment_start = self.clock.monotonic()
            self.last_error = None
            self._state = PlaybackState.RUNNING
            self._schedule()

            duration_str = f" for {duration:g}s" if duration > 0 else " (unbounded)"
            logger.info(
                f"Started{duration_str} with {self.tick_interval:.3f}s interval "
                f"({self._speed:g}x speed)"
            )

    def pause(self) -> None:
        with self._lock:
            self._require("pause")
            self._fold_segment()
            self._state = PlaybackState.PAUSED
            self._cancel_timer()
            logger.info(f"Paused at {self._elapsed:.2f}s")

    def resume(self) -> None:
        with self._lock:
            self._require("resume")
            self._segment_start = self.clock.monotonic()
            self._state = PlaybackState.RUNNING
            self._schedule()
            logger.info(f"Resumed at {self._elapsed:.2f}s")

    def stop(self) -> None:
        with self._lock:
            if self._state not in TRANSITIONS["stop"]:
                logger.debug(f"stop() ignored in state {self._state.value}")
                return
            if self._state is PlaybackState.RUNNING:
                self._fold_segment()
            self._cancel_timer()
            self._state = PlaybackState.STOPPED
            logger.info(f"Stopped at cycle {self._cycle_count}")

    def reset(self) -> None:
        with self._lock:
            self._cancel_timer()
            self._state = PlaybackState.IDLE
            self._speed = 1.0
            self._duration = 0.0
            self._cycle_count = 0
            self._elapsed_base = 0.0
            self._elapsed = 0.0
            self._segment_start = None
            self.last_error = None

            for source in self.sources.values():
                source.reset()

            logger.info("Reset complete")

    def step(self) -> TickResult:
        """
        Run exactly one cycle while paused. State stays PAUSED and
        elapsed time doesn't move. Errors propagate to the caller.
        """
        with self._lock:
            self._require("step")
            return self._run_cycle()

    def set_speed(self, multiplier: float) -> None:
        with self._lock:
            speed = _check_number(multiplier, "Speed multiplier")
            if speed <= 0:
                raise InvalidInput(f"Speed multiplier must be positive, got {speed}")

            if self._state is PlaybackState.RUNNING:
                # bank time at the old speed before switching
                self._fold_segment()
                self._segment_start = self.clock.monotonic()
                self._speed = speed
                self._schedule()
            else:
                self._speed = speed

            logger.info(f"Speed set to {speed:g}x")

    # ------------------------ QUERIES / INPUTS ------------------------

    def remaining_time(self) -> float:
        with self._lock:
            active = self._state in (PlaybackState.RUNNING, PlaybackState.PAUSED)
            if self._duration == 0 or not active:
                return 0.0
            return max(0.0, self._duration - self._elapsed)

    def status(self) -> StatusSnapshot:
        with self._lock:
            progress = None
            if self._duration > 0:
                progress = min(100.0, self._elapsed / self._duration * 100.0)
            return StatusSnapshot(
                state=self._state,
                cycle_count=self._cycle_count,
                speed_multiplier=self._speed,
                elapsed_seconds=self._elapsed,
                total_duration_seconds=self._duration,
                remaining_seconds=self.remaining_time(),
                progress=progress,
            )

    def set_override(self, lane, percent: float | None) -> None:
        """
        Pin a lane's demand to ``percent``. Out-of-range values are
        clamped to [0, 100] rather than rejected.

        :raises InvalidInput: unknown lane or non-numeric percent
        """
        with self._lock:
            self._source_for(lane).set_override(percent)

    def clear_override(self, lane) -> None:
        with self._lock:
            self._source_for(lane).clear_override()

    def update_config(self, **changes) -> ControllerConfig:
        with self._lock:
            return self.controller.update_config(**changes)

    # ------------------------ INTERNAL LOGIC ------------------------

    def _require(self, op: str) -> None:
        if self._state not in TRANSITIONS[op]:
            raise InvalidStateTransition(f"Can't {op} while {self._state.value}")

    def _source_for(self, lane) -> DemandSource:
        try:
            lane = parse_lane(lane)
        except ValueError as exc:
            raise InvalidInput(str(exc)) from exc
        if lane not in self.sources:
            raise InvalidInput(f"No demand source for lane {lane.name.lower()}")
        return self.sources[lane]

    def _fold_segment(self) -> None:
        """Bank the running segment into the elapsed total."""
        self._refresh_elapsed()
        self._elapsed_base = self._elapsed
        self._segment_start = None

    def _refresh_elapsed(self) -> None:
        if self._segment_start is None:
            return
        wall = self.clock.monotonic() - self._segment_start
        self._elapsed = self._elapsed_base + wall * self._speed

    def _schedule(self) -> None:
        # new generation first: anything already queued becomes stale
        self._generation += 1
        generation = self._generation
        self.timer.start(self.tick_interval, lambda: self._on_timer(generation))

    def _cancel_timer(self) -> None:
        self._generation += 1
        self.timer.cancel()

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._state is not PlaybackState.RUNNING:
                return
            try:
                self._tick()
            except Exception as exc:
                self.last_error = exc
                logger.exception(f"Tick failed at cycle {self._cycle_count}")
                if self.on_error is not None:
                    try:
                        self.on_error(exc)
                    except Exception:
                        logger.exception("on_error handler failed")

    def _tick(self) -> None:
        self._refresh_elapsed()

        if self._duration > 0 and self._elapsed >= self._duration:
            logger.info(f"Duration of {self._duration:g}s reached")
            self.stop()
            return

        self._run_cycle()

    def _run_cycle(self) -> TickResult:
        with Timer() as t:
            instant = self.clock.now()
            readings = {
                lane: source.generate_density(instant)
                for lane, source in self.sources.items()
            }
            allocation = self.controller.compute_green_times(readings)
            signals = self.controller.signal_state(allocation)
            efficiency = self.controller.efficiency(readings, allocation)

        result = TickResult(
            cycle_index=self._cycle_count,
            readings=readings,
            allocation=allocation,
            signal_state=signals,
            elapsed_seconds=self._elapsed,
            total_duration_seconds=self._duration,
            efficiency=efficiency,
            latency_ms=t.elapsed_ms,
            timestamp=instant,
        )
        logger.debug(f"Cycle {self._cycle_count}: readings={result.to_dict()['readings']}")

        self.sink(result)
        self._cycle_count += 1
        return result
