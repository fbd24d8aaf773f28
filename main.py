import time

from adaptive_signal.config import SessionConfig
from adaptive_signal.experiments.runner import build_scheduler, run_headless
from adaptive_signal.io.logging_utils import setup_logging, logger
from adaptive_signal.io.sinks import LoggingSink
from adaptive_signal.playback.state import PlaybackState
from adaptive_signal.timers import TIMERS


def choose_timer() -> str:
    print("=== Choose timer ===")
    for i, name in enumerate(TIMERS.keys(), start=1):
        print(f"{i}. {name}")
    choice = input("Enter number: ").strip()

    try:
        idx = int(choice) - 1
        name = list(TIMERS.keys())[idx]
    except (ValueError, IndexError):
        print("Invalid choice, falling back to 'thread'")
        name = "thread"
    return name


def main():
    setup_logging()

    print("=== Adaptive Signal Control Simulation ===")

    timer_name = choose_timer()

    try:
        duration = float(input("Simulated duration [s] (default 60, 0 = unbounded): ") or "60")
        speed = float(input("Speed multiplier (default 1.0): ") or "1.0")
        interval = float(input("Tick interval at 1x [s] (default 2.0): ") or "2.0")
    except ValueError:
        print("Invalid input, using defaults.")
        duration, speed, interval = 60.0, 1.0, 2.0

    cfg = SessionConfig(
        timer=timer_name,
        duration=duration,
        speed_multiplier=speed,
        base_interval=interval,
    )

    if timer_name == "manual":
        cycles = int(duration / interval) if duration > 0 else 30
        summary = run_headless(cfg, cycles)
        logger.info("Headless session finished.")
        logger.info(f"Cycles: {summary.cycles_completed} ({summary.final_state.value})")
        logger.info(f"Avg efficiency: {summary.avg_efficiency:.1f}%")
        for lane, green in summary.mean_allocation.items():
            logger.info(f"  {lane.name.lower():>5}: {green:.1f}s mean green")
        return

    scheduler = build_scheduler(cfg, LoggingSink())
    logger.info(f"Running session with timer='{timer_name}'")
    scheduler.start(duration)

    try:
        while scheduler.state is PlaybackState.RUNNING:
            time.sleep(0.2)
    except KeyboardInterrupt:
        scheduler.stop()

    status = scheduler.status()
    logger.info(f"Session finished after {status.cycle_count} cycles, "
                f"{status.elapsed_seconds:.1f}s simulated.")


if __name__ == "__main__":
    main()
