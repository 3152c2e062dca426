import json
from datetime import datetime, timezone
from typing import Any

# ----------------------------
# Parsing utilities
# ----------------------------

# Go's zero time, as serialized by controllers that never set the field
_ZERO_TIMESTAMPS = {"0001-01-01T00:00:00Z", "0001-01-01T00:00:00+00:00"}


def load_json(path: str) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def parse_time(ts: Any) -> datetime | None:
    """
    Parse a Kubernetes timestamp into an aware datetime.

    Returns None for the unset sentinel: missing, empty, or Go's zero time.
    """
    if ts is None or ts == "":
        return None
    if isinstance(ts, datetime):
        parsed = ts
    else:
        if ts in _ZERO_TIMESTAMPS:
            return None
        parsed = datetime.fromisoformat(str(ts).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    if parsed.year == 1:
        return None
    return parsed


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ----------------------------
# Pod accessors
# ----------------------------


def get_pod_name(pod: dict[str, Any]) -> str:
    return pod.get("metadata", {}).get("name", "<unknown>")


def get_pod_namespace(pod: dict[str, Any]) -> str:
    return pod.get("metadata", {}).get("namespace", "")


def get_pod_annotations(pod: dict[str, Any]) -> dict[str, str]:
    return pod.get("metadata", {}).get("annotations") or {}


def get_pod_phase(pod: dict[str, Any], default: str = "Unknown") -> str:
    return pod.get("status", {}).get("phase", default)


def get_pod_reason(pod: dict[str, Any]) -> str:
    return pod.get("status", {}).get("reason") or ""


def get_start_time(pod: dict[str, Any]) -> datetime | None:
    return parse_time(pod.get("status", {}).get("startTime"))


def pod_identity(pod: dict[str, Any]) -> str:
    namespace = get_pod_namespace(pod)
    name = get_pod_name(pod)
    return f"{namespace}/{name}" if namespace else name


def container_statuses(pod: dict[str, Any]) -> list[dict[str, Any]]:
    return pod.get("status", {}).get("containerStatuses") or []


def init_container_statuses(pod: dict[str, Any]) -> list[dict[str, Any]]:
    return pod.get("status", {}).get("initContainerStatuses") or []


def container_state_reason(status: dict[str, Any]) -> str | None:
    """
    Reason of a Waiting or Terminated container state.

    A Waiting or Terminated state without a reason yields "". Running
    containers carry no reason and yield None.
    """
    state = status.get("state") or {}
    for key in ("waiting", "terminated"):
        detail = state.get(key)
        if detail is not None:
            return detail.get("reason") or ""
    return None


def pod_condition(pod: dict[str, Any], cond_type: str) -> dict[str, Any] | None:
    for c in pod.get("status", {}).get("conditions") or []:
        if c.get("type") == cond_type:
            return c
    return None
