import logging
import threading
import time
from collections.abc import Callable
from datetime import datetime, timedelta

from croniter import croniter

from pod_reaper.durations import format_duration, parse_duration
from pod_reaper.errors import ConfigurationError
from pod_reaper.logs import get_logger
from pod_reaper.model import utc_now

logger = get_logger(__name__)

EVERY_PREFIX = "@every "


class Schedule:
    """
    Either a fixed interval ("@every 1m") or a cron expression.
    """

    def __init__(self, expression: str, interval: timedelta | None = None):
        self.expression = expression
        self.interval = interval

    def next_after(self, moment: datetime) -> datetime:
        if self.interval is not None:
            return moment + self.interval
        return croniter(self.expression, moment).get_next(datetime)

    def __repr__(self):
        return f"Schedule({self.expression!r})"


def parse_schedule(expression: str) -> Schedule:
    expression = (expression or "").strip()
    if expression.startswith(EVERY_PREFIX):
        try:
            interval = parse_duration(expression[len(EVERY_PREFIX):].strip())
        except ValueError as exc:
            raise ConfigurationError(f"invalid schedule {expression!r}: {exc}") from exc
        if interval <= timedelta(0):
            raise ConfigurationError(f"invalid schedule {expression!r}: interval must be positive")
        return Schedule(expression, interval=interval)

    if not expression or not croniter.is_valid(expression):
        raise ConfigurationError(f"invalid schedule {expression!r}")
    return Schedule(expression)


class Scheduler:
    """
    Fires registered callbacks on a schedule, one tick at a time, in the
    thread that called run().

    Ticks never overlap: a tick that runs past the next fire time delays
    it. Exceptions raised by a callback end run() and propagate.
    """

    def __init__(
        self,
        schedule: Schedule,
        log: logging.Logger | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.schedule = schedule
        self.log = log or logger
        self.clock = clock
        self._callbacks: list[Callable[[], object]] = []
        self._stopped = threading.Event()

    def on_tick(self, callback: Callable[[], object]) -> None:
        self._callbacks.append(callback)

    def stop(self) -> None:
        """
        Safe to call from any thread; an in-flight tick completes first.
        """
        self._stopped.set()

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    def _tick(self) -> None:
        for callback in self._callbacks:
            callback()

    def run(self, run_duration: timedelta = timedelta(0)) -> None:
        seconds = run_duration.total_seconds()
        deadline = time.monotonic() + seconds if seconds > 0 else None

        if deadline is None:
            self.log.info("starting scheduler %s, running until stopped", self.schedule.expression)
        else:
            self.log.info(
                "starting scheduler %s, running for %s",
                self.schedule.expression,
                format_duration(run_duration),
            )

        next_fire = self.schedule.next_after(self.clock())
        while True:
            wait = (next_fire - self.clock()).total_seconds()
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                wait = min(wait, remaining)

            if self._stopped.wait(max(wait, 0.0)):
                break
            if deadline is not None and time.monotonic() >= deadline:
                break
            if self.clock() < next_fire:
                continue

            self._tick()
            next_fire = self.schedule.next_after(self.clock())

        self._stopped.set()
        self.log.info("scheduler stopped")
