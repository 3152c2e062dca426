from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import MaxRetryError

from pod_reaper.client import PodStore
from pod_reaper.errors import ReapError, RetrievalError
from pod_reaper.model import get_start_time, pod_identity

STARTED = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def v1_pod(name, namespace="default"):
    return client.V1Pod(
        metadata=client.V1ObjectMeta(
            name=name, namespace=namespace, annotations={"example/key": "lizard"}
        ),
        status=client.V1PodStatus(
            phase="Running",
            start_time=STARTED,
            container_statuses=[
                client.V1ContainerStatus(
                    name="main",
                    image="busybox",
                    image_id="",
                    ready=False,
                    restart_count=4,
                    state=client.V1ContainerState(
                        waiting=client.V1ContainerStateWaiting(reason="CrashLoopBackOff")
                    ),
                )
            ],
        ),
    )


@pytest.fixture
def api():
    api = MagicMock()
    api.list_namespaced_pod.return_value = client.V1PodList(items=[v1_pod("a"), v1_pod("b")])
    api.list_pod_for_all_namespaces.return_value = client.V1PodList(
        items=[v1_pod("c", namespace="kube-system")]
    )
    return api


def test_list_namespaced(api):
    pods = PodStore(api).list_pods("default", "app in (web)")
    api.list_namespaced_pod.assert_called_once_with("default", label_selector="app in (web)")
    assert [pod_identity(p) for p in pods] == ["default/a", "default/b"]


def test_list_all_namespaces(api):
    pods = PodStore(api).list_pods("", "")
    api.list_pod_for_all_namespaces.assert_called_once_with(label_selector="")
    assert [pod_identity(p) for p in pods] == ["kube-system/c"]


def test_listed_pods_are_kubernetes_shaped(api):
    pod = PodStore(api).list_pods("default")[0]
    assert pod["metadata"]["annotations"] == {"example/key": "lizard"}
    assert pod["status"]["phase"] == "Running"
    assert get_start_time(pod) == STARTED
    state = pod["status"]["containerStatuses"][0]["state"]
    assert state == {"waiting": {"reason": "CrashLoopBackOff"}}


@pytest.mark.parametrize(
    "error", [ApiException(status=500, reason="boom"), MaxRetryError(None, "/api")]
)
def test_list_failure_is_a_retrieval_error(api, error):
    api.list_namespaced_pod.side_effect = error
    with pytest.raises(RetrievalError):
        PodStore(api).list_pods("default")


def test_delete_passes_grace_period(api):
    PodStore(api).delete_pod("default", "a", grace_period=30)
    args, kwargs = api.delete_namespaced_pod.call_args
    assert args == ("a", "default")
    assert kwargs["body"].grace_period_seconds == 30


def test_delete_without_grace_period(api):
    PodStore(api).delete_pod("default", "a")
    assert api.delete_namespaced_pod.call_args.kwargs["body"].grace_period_seconds is None


def test_delete_failure_is_a_reap_error(api):
    api.delete_namespaced_pod.side_effect = ApiException(status=404, reason="Not Found")
    with pytest.raises(ReapError) as excinfo:
        PodStore(api).delete_pod("default", "a")
    assert (excinfo.value.namespace, excinfo.value.name) == ("default", "a")


def test_evict_builds_eviction(api):
    PodStore(api).evict_pod("default", "a", grace_period=10)
    name, namespace, body = api.create_namespaced_pod_eviction.call_args.args
    assert (name, namespace) == ("a", "default")
    assert body.metadata.name == "a"
    assert body.metadata.namespace == "default"
    assert body.delete_options.grace_period_seconds == 10


def test_evict_rejected_by_disruption_budget(api):
    api.create_namespaced_pod_eviction.side_effect = ApiException(
        status=429, reason="Too Many Requests"
    )
    with pytest.raises(ReapError):
        PodStore(api).evict_pod("default", "a")
