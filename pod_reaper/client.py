from typing import Any

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError

from pod_reaper.errors import ConfigurationError, ReapError, RetrievalError
from pod_reaper.logs import get_logger

logger = get_logger(__name__)

_TRANSPORT_ERRORS = (ApiException, HTTPError)


def connect() -> client.CoreV1Api:
    """
    In-cluster service account first, local kubeconfig as a fallback.
    """
    try:
        config.load_incluster_config()
        logger.debug("using in-cluster configuration")
    except ConfigException:
        try:
            config.load_kube_config()
        except ConfigException as exc:
            raise ConfigurationError(f"no usable cluster configuration: {exc}") from exc
        logger.debug("using kubeconfig configuration")
    return client.CoreV1Api()


class PodStore:
    """
    Pod listing and termination against the Kubernetes API.

    Pods are returned as Kubernetes-shaped JSON dicts (camelCase keys,
    ISO-8601 timestamps), the same shape `kubectl get pod -o json` prints.
    """

    def __init__(self, api: client.CoreV1Api | None = None):
        self.api = api if api is not None else connect()
        self._serializer = client.ApiClient()

    def list_pods(self, namespace: str = "", label_selector: str = "") -> list[dict[str, Any]]:
        try:
            if namespace:
                pods = self.api.list_namespaced_pod(namespace, label_selector=label_selector)
            else:
                pods = self.api.list_pod_for_all_namespaces(label_selector=label_selector)
        except _TRANSPORT_ERRORS as exc:
            scope = namespace or "all namespaces"
            raise RetrievalError(f"unable to list pods in {scope}: {exc}") from exc
        return [self._serializer.sanitize_for_serialization(pod) for pod in pods.items]

    def delete_pod(self, namespace: str, name: str, grace_period: int | None = None) -> None:
        try:
            self.api.delete_namespaced_pod(
                name,
                namespace,
                body=client.V1DeleteOptions(grace_period_seconds=grace_period),
            )
        except _TRANSPORT_ERRORS as exc:
            raise ReapError(
                f"unable to delete pod: {exc}", namespace=namespace, name=name
            ) from exc

    def evict_pod(self, namespace: str, name: str, grace_period: int | None = None) -> None:
        """
        Eviction honours PodDisruptionBudgets; a budget rejection surfaces
        as a ReapError like any other failure.
        """
        eviction = client.V1Eviction(
            metadata=client.V1ObjectMeta(name=name, namespace=namespace),
            delete_options=client.V1DeleteOptions(grace_period_seconds=grace_period),
        )
        try:
            self.api.create_namespaced_pod_eviction(name, namespace, eviction)
        except _TRANSPORT_ERRORS as exc:
            raise ReapError(
                f"unable to evict pod: {exc}", namespace=namespace, name=name
            ) from exc
