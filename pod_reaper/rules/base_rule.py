from collections.abc import Mapping
from typing import Any

from pod_reaper.errors import ConfigurationError


class ReapRule:
    """
    Base class for all reap rules.

    A rule is constructed empty, loaded once from configuration, and then
    evaluated against every pod of every cycle without changing again.
    """

    # ---- Metadata (mandatory) ----
    name: str = "BaseRule"
    config_key: str = ""

    def load(self, config: Mapping[str, str]) -> tuple[bool, str]:
        """
        Returns (loaded, description).

        - key absent: (False, "") and the rule stays inert
        - key present but unparsable: ConfigurationError
        - key present and valid: (True, human readable description)
        """
        value = config.get(self.config_key)
        if value is None:
            return False, ""
        try:
            self.parse(value)
        except ValueError as exc:
            raise ConfigurationError(
                f"invalid value {value!r} for {self.config_key}: {exc}"
            ) from exc
        return True, self.describe(value)

    def parse(self, value: str) -> None:
        raise NotImplementedError

    def describe(self, value: str) -> str:
        raise NotImplementedError

    def should_reap(self, pod: dict[str, Any]) -> tuple[bool, str]:
        """
        Must return (False, "") when the rule does not apply to the pod.
        """
        raise NotImplementedError


class MatchListRule(ReapRule):
    """
    Rule configured with a comma-separated list of literal tokens.

    Tokens are neither trimmed nor case-folded.
    """

    label: str = ""

    def __init__(self) -> None:
        self.values: list[str] = []

    def parse(self, value: str) -> None:
        self.values = value.split(",")

    def describe(self, value: str) -> str:
        return f"{self.label} in [{value}]"
