import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from pod_reaper.durations import parse_duration
from pod_reaper.engine import RuleSet
from pod_reaper.errors import ConfigurationError
from pod_reaper.loader import load_rules

DEFAULT_SCHEDULE = "@every 1m"


class SortStrategy(str, Enum):
    DEFAULT = ""
    RANDOM = "random"
    OLDEST_FIRST = "oldest-first"
    YOUNGEST_FIRST = "youngest-first"
    PRIORITY_COST = "priority-cost"

    @classmethod
    def parse(cls, value: str) -> "SortStrategy":
        if value == "pod-deletion-cost":
            return cls.PRIORITY_COST
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(s.value for s in cls if s.value)
            raise ConfigurationError(
                f"unknown pod sorting strategy {value!r}, expected one of: {allowed}"
            ) from None


@dataclass(frozen=True)
class Requirement:
    """
    Set-membership requirement on a label or annotation key.
    """

    key: str
    operator: str
    values: tuple[str, ...]

    IN = "in"
    NOT_IN = "notin"

    def __post_init__(self):
        if self.operator not in (self.IN, self.NOT_IN):
            raise ValueError(f"unsupported operator {self.operator!r}")
        if not self.key:
            raise ValueError("requirement key must not be empty")
        if not self.values:
            raise ValueError(f"requirement on {self.key!r} needs at least one value")

    def matches(self, mapping: Mapping[str, str]) -> bool:
        if self.operator == self.IN:
            return self.key in mapping and mapping[self.key] in self.values
        # notin also admits objects that lack the key entirely
        return self.key not in mapping or mapping[self.key] not in self.values

    def to_selector(self) -> str:
        return f"{self.key} {self.operator} ({','.join(sorted(self.values))})"


@dataclass(frozen=True)
class Options:
    rules: RuleSet
    namespace: str = ""
    schedule: str = DEFAULT_SCHEDULE
    run_duration: timedelta = timedelta(0)
    label_exclusion: Requirement | None = None
    label_requirement: Requirement | None = None
    annotation_requirement: Requirement | None = None
    dry_run: bool = False
    max_pods: int = 0
    pod_sorting_strategy: SortStrategy = SortStrategy.DEFAULT
    evict: bool = False
    grace_period: int | None = None

    def label_selector(self) -> str:
        parts = [
            req.to_selector()
            for req in (self.label_exclusion, self.label_requirement)
            if req is not None
        ]
        return ",".join(parts)


# ----------------------------
# Parsing
# ----------------------------

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


def parse_bool(key: str, value: str | None) -> bool:
    if value is None:
        return False
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigurationError(f"invalid boolean {value!r} for {key}")


def _duration(key: str, value: str | None) -> timedelta | None:
    if value is None:
        return None
    try:
        return parse_duration(value)
    except ValueError as exc:
        raise ConfigurationError(f"invalid duration for {key}: {exc}") from exc


def _requirement(
    config: Mapping[str, str], key_name: str, values_name: str, operator: str
) -> Requirement | None:
    key = config.get(key_name)
    values = config.get(values_name)
    if key is None and values is None:
        return None
    if not key:
        raise ConfigurationError(f"{values_name} is set but {key_name} is not")
    if not values:
        raise ConfigurationError(f"{key_name} is set but {values_name} is not")
    return Requirement(key=key, operator=operator, values=tuple(values.split(",")))


def load_options(
    config: Mapping[str, str],
    rules: RuleSet | None = None,
    log: logging.Logger | None = None,
) -> Options:
    """
    Validate every reaper setting once, before the first cycle.
    """
    run_duration = _duration("RUN_DURATION", config.get("RUN_DURATION")) or timedelta(0)
    if run_duration < timedelta(0):
        raise ConfigurationError("RUN_DURATION must not be negative")

    grace_period = None
    grace = _duration("GRACE_PERIOD", config.get("GRACE_PERIOD"))
    if grace is not None:
        if grace < timedelta(0):
            raise ConfigurationError("GRACE_PERIOD must not be negative")
        grace_period = int(grace.total_seconds())

    max_pods = 0
    if config.get("MAX_PODS") is not None:
        try:
            max_pods = int(config["MAX_PODS"])
        except ValueError:
            raise ConfigurationError(
                f"invalid integer {config['MAX_PODS']!r} for MAX_PODS"
            ) from None
        if max_pods < 0:
            raise ConfigurationError("MAX_PODS must not be negative")

    return Options(
        rules=rules if rules is not None else load_rules(config, log=log),
        namespace=config.get("NAMESPACE", ""),
        schedule=config.get("SCHEDULE") or DEFAULT_SCHEDULE,
        run_duration=run_duration,
        label_exclusion=_requirement(
            config, "EXCLUDE_LABEL_KEY", "EXCLUDE_LABEL_VALUES", Requirement.NOT_IN
        ),
        label_requirement=_requirement(
            config, "REQUIRE_LABEL_KEY", "REQUIRE_LABEL_VALUES", Requirement.IN
        ),
        annotation_requirement=_requirement(
            config, "REQUIRE_ANNOTATION_KEY", "REQUIRE_ANNOTATION_VALUES", Requirement.IN
        ),
        dry_run=parse_bool("DRY_RUN", config.get("DRY_RUN")),
        max_pods=max_pods,
        pod_sorting_strategy=SortStrategy.parse(config.get("POD_SORTING_STRATEGY", "")),
        evict=parse_bool("EVICT", config.get("EVICT")),
        grace_period=grace_period,
    )
