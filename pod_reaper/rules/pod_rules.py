from pod_reaper.model import get_pod_phase, get_pod_reason
from pod_reaper.rules.base_rule import MatchListRule


class PodStatusRule(MatchListRule):
    name = "PodStatus"
    config_key = "POD_STATUSES"
    label = "pod status"

    def should_reap(self, pod):
        reason = get_pod_reason(pod)
        if reason in self.values:
            return True, f"has pod status {reason}"
        return False, ""


class PodStatusPhaseRule(MatchListRule):
    name = "PodStatusPhase"
    config_key = "POD_STATUS_PHASES"
    label = "pod status phase"

    def should_reap(self, pod):
        phase = get_pod_phase(pod, default="")
        if phase in self.values:
            return True, f"has pod status phase {phase}"
        return False, ""
