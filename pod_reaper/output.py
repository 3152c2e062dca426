import json
from typing import Any

import yaml

from pod_reaper.engine import RuleSet, Verdict
from pod_reaper.model import get_pod_name, get_pod_namespace, get_pod_phase

# ----------------------------
# Output formatting
# ----------------------------


def build_result(pod: dict[str, Any], rules: RuleSet, verdict: Verdict) -> dict[str, Any]:
    return {
        "pod": get_pod_name(pod),
        "namespace": get_pod_namespace(pod),
        "phase": get_pod_phase(pod),
        "rules": rules.descriptions,
        "reap": verdict.reap,
        "reasons": [
            {"rule": description, "reason": reason}
            for description, reason in verdict.reasons
        ],
    }


def output_result(result: dict[str, Any], fmt: str = "text") -> None:
    """
    Prints the verdict for a single pod.
    - Lists the loaded rules in evaluation order
    - Shows every (rule, reason) pair when the pod would be reaped
    """
    if fmt == "json":
        print(json.dumps(result, indent=2))
        return

    if fmt == "yaml":
        print(yaml.safe_dump(result, sort_keys=False))
        return

    # ----------------------------
    # Text output
    # ----------------------------
    identity = result["pod"]
    if result.get("namespace"):
        identity = f"{result['namespace']}/{identity}"
    print(f"Pod: {identity}")
    print(f"Phase: {result['phase']}")

    print("\nRules:")
    for description in result["rules"]:
        print(f"  - {description}")

    print(f"\nReap: {'yes' if result['reap'] else 'no'}")
    if result["reasons"]:
        print("\nReasons:")
        for item in result["reasons"]:
            print(f"  - {item['rule']}: {item['reason']}")
