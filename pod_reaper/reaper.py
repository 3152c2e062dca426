import logging
import random
from typing import Any, Protocol

from pod_reaper.engine import Verdict
from pod_reaper.errors import ReapError
from pod_reaper.logs import get_logger
from pod_reaper.model import (
    get_pod_annotations,
    get_pod_name,
    get_pod_namespace,
    get_start_time,
    pod_identity,
)
from pod_reaper.options import Options, SortStrategy
from pod_reaper.scheduler import Scheduler, parse_schedule

logger = get_logger(__name__)

DELETION_COST_ANNOTATION = "controller.kubernetes.io/pod-deletion-cost"


class PodSource(Protocol):
    def list_pods(self, namespace: str = "", label_selector: str = "") -> list[dict[str, Any]]: ...

    def delete_pod(self, namespace: str, name: str, grace_period: int | None = None) -> None: ...

    def evict_pod(self, namespace: str, name: str, grace_period: int | None = None) -> None: ...


# ----------------------------
# Ordering
# ----------------------------


def deletion_cost(pod: dict[str, Any]) -> int:
    # Kubernetes treats a missing or malformed cost as 0
    try:
        return int(get_pod_annotations(pod).get(DELETION_COST_ANNOTATION, 0))
    except (TypeError, ValueError):
        return 0


def _by_start_time(pods: list[dict[str, Any]], newest_first: bool) -> list[dict[str, Any]]:
    started = [p for p in pods if get_start_time(p) is not None]
    unstarted = [p for p in pods if get_start_time(p) is None]
    started.sort(key=get_start_time, reverse=newest_first)
    return started + unstarted


def sort_pods(
    pods: list[dict[str, Any]],
    strategy: SortStrategy,
    rng: random.Random | None = None,
) -> list[dict[str, Any]]:
    """
    Order candidates for termination. Pods without a start time always go
    last for the age based strategies.
    """
    pods = list(pods)
    if strategy == SortStrategy.RANDOM:
        (rng or random.Random()).shuffle(pods)
        return pods
    if strategy == SortStrategy.OLDEST_FIRST:
        return _by_start_time(pods, newest_first=False)
    if strategy == SortStrategy.YOUNGEST_FIRST:
        return _by_start_time(pods, newest_first=True)
    if strategy == SortStrategy.PRIORITY_COST:
        return sorted(pods, key=deletion_cost)
    return pods


# ----------------------------
# Reaper
# ----------------------------


class Reaper:
    def __init__(
        self,
        store: PodSource,
        options: Options,
        log: logging.Logger | None = None,
        rng: random.Random | None = None,
    ):
        self.store = store
        self.options = options
        self.log = log or logger
        self.rng = rng or random.Random()

    def filter_pods(self, pods: list[dict[str, Any]]) -> list[dict[str, Any]]:
        requirement = self.options.annotation_requirement
        if requirement is None:
            return list(pods)
        return [p for p in pods if requirement.matches(get_pod_annotations(p))]

    def get_pods(self) -> list[dict[str, Any]]:
        """
        List, filter and order this cycle's candidates.

        RetrievalError from the store is not caught here.
        """
        pods = self.store.list_pods(
            namespace=self.options.namespace,
            label_selector=self.options.label_selector(),
        )
        pods = self.filter_pods(pods)
        return sort_pods(pods, self.options.pod_sorting_strategy, rng=self.rng)

    def reap_pod(self, pod: dict[str, Any], verdict: Verdict, reaped: int) -> bool:
        """
        Terminate one pod that matched every rule.

        Returns True when the pod counts against the per-cycle cap: a
        successful termination or a dry-run selection. Failures are logged
        and do not count.
        """
        namespace = get_pod_namespace(pod)
        name = get_pod_name(pod)
        identity = pod_identity(pod)
        fields = {"pod": name, "namespace": namespace, "reasons": verdict.describe()}

        if self.options.max_pods and reaped >= self.options.max_pods:
            self.log.debug("maximum pods reached, skipping %s", identity, extra=fields)
            return False

        if self.options.dry_run:
            self.log.info("pod %s would be reaped (dry run)", identity, extra=fields)
            return True

        try:
            if self.options.evict:
                self.store.evict_pod(namespace, name, self.options.grace_period)
            else:
                self.store.delete_pod(namespace, name, self.options.grace_period)
        except ReapError as exc:
            self.log.error(
                "unable to reap pod %s: %s",
                identity,
                exc,
                extra={**fields, "error": str(exc)},
            )
            return False

        self.log.info("reaped pod %s", identity, extra=fields)
        return True

    def reap_cycle(self) -> int:
        """
        One full pass over the fleet. Returns the number of pods counted
        against the cap.
        """
        reaped = 0
        for pod in self.get_pods():
            verdict = self.options.rules.should_reap(pod)
            if not verdict:
                continue
            if self.reap_pod(pod, verdict, reaped):
                reaped += 1
        return reaped

    def harvest(self) -> None:
        """
        Run reap_cycle on the configured schedule until the run duration
        elapses, or forever when it is zero.
        """
        schedule = parse_schedule(self.options.schedule)
        scheduler = Scheduler(schedule, log=self.log)
        scheduler.on_tick(self.reap_cycle)
        scheduler.run(self.options.run_duration)
