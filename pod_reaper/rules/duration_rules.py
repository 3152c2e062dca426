from collections.abc import Callable
from datetime import datetime, timedelta

from pod_reaper.durations import format_duration, parse_duration
from pod_reaper.model import get_start_time, parse_time, pod_condition, utc_now
from pod_reaper.rules.base_rule import ReapRule


class _ElapsedRule(ReapRule):
    def __init__(self, now: Callable[[], datetime] | None = None) -> None:
        self.now = now or utc_now
        self.limit = timedelta(0)

    def parse(self, value):
        self.limit = parse_duration(value)


class MaxDurationRule(_ElapsedRule):
    """
    Reaps pods that have been running longer than the configured duration.

    Pods without a start time have not been scheduled yet and never match.
    """

    name = "MaxDuration"
    config_key = "MAX_DURATION"

    def describe(self, value):
        return f"maximum run duration {value}"

    def should_reap(self, pod):
        started = get_start_time(pod)
        if started is None:
            return False, ""
        running = self.now() - started
        if running > self.limit:
            return True, f"has been running for {format_duration(running)}"
        return False, ""


class UnreadyRule(_ElapsedRule):
    """
    Reaps pods whose Ready condition has been anything but "True" for
    longer than the configured duration.
    """

    name = "Unready"
    config_key = "MAX_UNREADY"

    def describe(self, value):
        return f"maximum unready {value}"

    def should_reap(self, pod):
        condition = pod_condition(pod, "Ready")
        if condition is None or condition.get("status") == "True":
            return False, ""

        # Unset transition time: unready since when is unknowable
        transitioned = parse_time(condition.get("lastTransitionTime"))
        if transitioned is None:
            return False, ""

        unready = self.now() - transitioned
        if unready > self.limit:
            return True, f"has been unready for {format_duration(unready)}"
        return False, ""
