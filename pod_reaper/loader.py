import logging
import random
from collections.abc import Callable, Mapping
from datetime import datetime

from pod_reaper.engine import LoadedRule, RuleSet
from pod_reaper.logs import get_logger
from pod_reaper.rules.base_rule import ReapRule
from pod_reaper.rules.chaos_rules import ChaosRule
from pod_reaper.rules.container_rules import ContainerStatusRule
from pod_reaper.rules.duration_rules import MaxDurationRule, UnreadyRule
from pod_reaper.rules.pod_rules import PodStatusPhaseRule, PodStatusRule

logger = get_logger(__name__)

# ----------------------------
# Rule registration table
# ----------------------------

# Order is observable: it decides reason ordering and where evaluation
# short-circuits.
RULE_TYPES: tuple[type[ReapRule], ...] = (
    ChaosRule,
    ContainerStatusRule,
    MaxDurationRule,
    UnreadyRule,
    PodStatusRule,
    PodStatusPhaseRule,
)


def build_rules(
    rng: random.Random | None = None,
    now: Callable[[], datetime] | None = None,
) -> list[ReapRule]:
    """
    Instantiate one empty rule per registered type.
    """
    rules: list[ReapRule] = []
    for rule_type in RULE_TYPES:
        if rule_type is ChaosRule:
            rules.append(ChaosRule(rng=rng))
        elif issubclass(rule_type, (MaxDurationRule, UnreadyRule)):
            rules.append(rule_type(now=now))
        else:
            rules.append(rule_type())
    return rules


def validate_rule(rule: ReapRule):
    for field in ("name", "config_key"):
        value = getattr(rule, field, None)
        if not isinstance(value, str) or not value:
            raise ValueError(f"Rule {rule!r}.{field} must be a non-empty string")
    for method in ("load", "should_reap"):
        if not callable(getattr(rule, method, None)):
            raise ValueError(f"Rule {rule.name} must implement {method}()")


def load_rules(
    config: Mapping[str, str],
    log: logging.Logger | None = None,
    rng: random.Random | None = None,
    now: Callable[[], datetime] | None = None,
    rules: list[ReapRule] | None = None,
) -> RuleSet:
    """
    Load every registered rule from config and keep the ones that apply.

    A malformed value raises ConfigurationError straight away; ending up
    with no loaded rule at all raises it too.
    """
    log = log or logger
    candidates = rules if rules is not None else build_rules(rng=rng, now=now)

    loaded: list[LoadedRule] = []
    for rule in candidates:
        validate_rule(rule)
        active, description = rule.load(config)
        if not active:
            log.debug("rule %s not configured", rule.name)
            continue
        log.info("loaded rule: %s", description)
        loaded.append(LoadedRule(rule=rule, description=description))

    return RuleSet(loaded)
