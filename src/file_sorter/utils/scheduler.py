"""
Fixed-interval scheduler for daemon mode.
"""

import logging
import threading
import time
from enum import Enum
from typing import Any, Callable, Optional

from .error_handler import ErrorHandler

logger = logging.getLogger(__name__)

MIN_INTERVAL = 1


class SchedulerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class Scheduler:
    """Run a task every ``interval`` seconds until stopped.

    Ticks fall on ``start + k * interval``. A run that overruns one or more
    tick times causes those ticks to be skipped, never queued, so there is at
    most one run at a time. The task receives the stop event and may poll it
    to end early; a run is never interrupted from outside.
    """

    def __init__(
        self,
        task: Callable[[threading.Event], Any],
        interval: float,
        on_result: Optional[Callable[[Any], None]] = None,
        error_handler: Optional[ErrorHandler] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the scheduler.

        Args:
            task: Callable run on each tick, given the stop event
            interval: Seconds between ticks, at least 1
            on_result: Optional callback receiving each successful result
            error_handler: Records failed runs
            clock: Monotonic time source
        """
        if interval < MIN_INTERVAL:
            raise ValueError(f"interval must be >= {MIN_INTERVAL} second")

        self.task = task
        self.interval = interval
        self.on_result = on_result
        self.error_handler = error_handler or ErrorHandler()
        self.clock = clock

        self.stop_event = threading.Event()
        self.completed_runs = 0
        self.failed_runs = 0
        self.skipped_ticks = 0
        self._state = SchedulerState.IDLE
        self._thread: Optional[threading.Thread] = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_stopped(self) -> bool:
        return self._state is SchedulerState.STOPPED

    def run_forever(self):
        """Run ticks on the calling thread until stop() is called."""
        if self._state is SchedulerState.STOPPED:
            raise RuntimeError("Scheduler has already been stopped")

        logger.info(f"Scheduler started, interval {self.interval}s")
        next_tick = self.clock()

        try:
            while not self.stop_event.is_set():
                self._run_tick()
                if self.stop_event.is_set():
                    break

                next_tick += self.interval
                now = self.clock()
                if now > next_tick:
                    missed = int((now - next_tick) // self.interval) + 1
                    self.skipped_ticks += missed
                    next_tick += missed * self.interval
                    logger.warning(f"Run overran its interval, skipped {missed} tick(s)")

                self.stop_event.wait(max(0.0, next_tick - now))
        finally:
            self._state = SchedulerState.STOPPED
            logger.info("Scheduler stopped")

    def start(self) -> threading.Thread:
        """Run the scheduler loop on a background thread."""
        if self._thread and self._thread.is_alive():
            logger.warning("Scheduler already running")
            return self._thread

        self._thread = threading.Thread(
            target=self.run_forever, name="file-sorter-scheduler", daemon=True
        )
        self._thread.start()
        return self._thread

    def stop(self, timeout: Optional[float] = None):
        """Request cancellation and wait for a background loop to finish.

        The current file move, if any, completes before the loop exits.
        """
        self.stop_event.set()
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)

    def _run_tick(self):
        self._state = SchedulerState.RUNNING
        try:
            result = self.task(self.stop_event)
        except Exception as e:
            self.failed_runs += 1
            self.error_handler.handle_error(e, "scheduled run")
            logger.warning("Scheduled run failed, continuing with next tick")
        else:
            self.completed_runs += 1
            if self.on_result is not None:
                try:
                    self.on_result(result)
                except Exception:
                    logger.exception("Result callback failed")
        finally:
            self._state = SchedulerState.IDLE
