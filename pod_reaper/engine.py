from dataclasses import dataclass, field
from typing import Any

from pod_reaper.errors import ConfigurationError
from pod_reaper.rules.base_rule import ReapRule


@dataclass(frozen=True)
class Verdict:
    """
    Outcome of evaluating every loaded rule against one pod.

    reasons holds (rule description, rule reason) pairs in registration
    order. It is non-empty exactly when reap is True.
    """

    reap: bool
    reasons: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def __bool__(self) -> bool:
        return self.reap

    def describe(self) -> list[str]:
        return [f"{description}: {reason}" for description, reason in self.reasons]


NO_REAP = Verdict(reap=False)


@dataclass(frozen=True)
class LoadedRule:
    rule: ReapRule
    description: str


class RuleSet:
    """
    Ordered conjunction of loaded rules.
    """

    def __init__(self, loaded: list[LoadedRule]):
        if not loaded:
            raise ConfigurationError(
                "no rules were loaded: at least one termination criteria must be configured"
            )
        self.loaded = tuple(loaded)

    @property
    def rules(self) -> list[ReapRule]:
        return [entry.rule for entry in self.loaded]

    @property
    def descriptions(self) -> list[str]:
        return [entry.description for entry in self.loaded]

    def __len__(self) -> int:
        return len(self.loaded)

    def should_reap(self, pod: dict[str, Any]) -> Verdict:
        """
        Short-circuit AND across the rules in registration order.

        The first rule that declines ends evaluation and discards every
        reason gathered so far.
        """
        reasons: list[tuple[str, str]] = []
        for entry in self.loaded:
            reap, reason = entry.rule.should_reap(pod)
            if not reap:
                return NO_REAP
            reasons.append((entry.description, reason))
        return Verdict(reap=True, reasons=tuple(reasons))
