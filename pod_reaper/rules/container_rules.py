from pod_reaper.model import (
    container_state_reason,
    container_statuses,
    init_container_statuses,
)
from pod_reaper.rules.base_rule import MatchListRule


class ContainerStatusRule(MatchListRule):
    name = "ContainerStatus"
    config_key = "CONTAINER_STATUSES"
    label = "container status"

    def should_reap(self, pod):
        # Regular containers are scanned before init containers
        scans = (
            (container_statuses(pod), "container"),
            (init_container_statuses(pod), "init container"),
        )
        for statuses, kind in scans:
            for status in statuses:
                reason = container_state_reason(status)
                if reason is not None and reason in self.values:
                    return True, f"has {kind} status {reason}"
        return False, ""
