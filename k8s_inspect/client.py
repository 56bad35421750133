"""
Read-only cluster client.

One coroutine per upstream read, each backed by a single kubectl call.
List methods return the ``items`` array of the kubectl ``List`` document;
get methods return the resource object itself. Nothing here can write to
the cluster.
"""

from __future__ import annotations

from dataclasses import dataclass

from k8s_inspect.config import Settings
from k8s_inspect.kubectl import (
    KUBECTL_TIMEOUT,
    KubectlError,
    check_context_allowed,
    kubectl,
    kubectl_json,
    parse_json,
)

CORE_API_PATH = "/api/v1"


def _positional(name: str) -> str:
    """Refuse resource names kubectl would parse as flags."""
    if name.startswith("-"):
        raise KubectlError(f"Invalid resource name '{name}': must not start with '-'")
    return name


@dataclass(frozen=True)
class ClusterClient:
    kubeconfig: str | None = None
    context: str | None = None
    allowed_contexts: tuple[str, ...] = ()
    timeout: int = KUBECTL_TIMEOUT

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClusterClient":
        return cls(
            kubeconfig=settings.kubeconfig,
            context=settings.context,
            allowed_contexts=settings.allowed_contexts,
            timeout=settings.kubectl_timeout,
        )

    # -- plumbing ------------------------------------------------------------

    def _opts(self, namespace: str | None = None) -> dict:
        check_context_allowed(self.context, self.allowed_contexts)
        return {
            "kubeconfig": self.kubeconfig,
            "context": self.context,
            "namespace": namespace,
            "timeout_override": self.timeout,
        }

    async def _list(
        self,
        resource: str,
        namespace: str | None = None,
        label_selector: str | None = None,
    ) -> list[dict]:
        cmd = ["get", resource]
        if label_selector:
            cmd += ["-l", label_selector]
        data = await kubectl_json(cmd, **self._opts(namespace))
        items = data.get("items") or []
        if not isinstance(items, list):
            raise KubectlError(f"Unexpected {resource} list response: 'items' is not a list")
        return items

    async def _get(self, resource: str, name: str, namespace: str | None = None) -> dict:
        return await kubectl_json(["get", resource, _positional(name)], **self._opts(namespace))

    # -- cluster -------------------------------------------------------------

    async def get_cluster_metadata(self) -> dict:
        """Current context, cluster entry and core API resource list.

        The kubeconfig read is local; only the ``/api/v1`` discovery call
        reaches the API server.
        """
        opts = self._opts()
        config = await kubectl_json(["config", "view", "--minify"], **opts)
        resources = parse_json(await kubectl(["get", "--raw", CORE_API_PATH], **opts))
        return {"config": config, "apiResourceList": resources}

    async def cluster_reachable(self) -> bool:
        try:
            await kubectl(["cluster-info"], **{**self._opts(), "timeout_override": 5})
        except KubectlError:
            return False
        return True

    # -- namespaced workloads ------------------------------------------------

    async def list_pods(self, namespace: str, label_selector: str | None = None) -> list[dict]:
        return await self._list("pods", namespace, label_selector)

    async def list_services(self, namespace: str, label_selector: str | None = None) -> list[dict]:
        return await self._list("services", namespace, label_selector)

    async def list_deployments(self, namespace: str, label_selector: str | None = None) -> list[dict]:
        return await self._list("deployments.apps", namespace, label_selector)

    async def list_configmaps(self, namespace: str, label_selector: str | None = None) -> list[dict]:
        return await self._list("configmaps", namespace, label_selector)

    async def get_pod(self, name: str, namespace: str) -> dict:
        return await self._get("pod", name, namespace)

    async def get_service(self, name: str, namespace: str) -> dict:
        return await self._get("service", name, namespace)

    async def get_deployment(self, name: str, namespace: str) -> dict:
        return await self._get("deployment.apps", name, namespace)

    async def get_configmap(self, name: str, namespace: str) -> dict:
        return await self._get("configmap", name, namespace)

    async def get_pod_logs(
        self,
        name: str,
        namespace: str,
        container: str | None = None,
        tail_lines: int | None = None,
    ) -> str:
        cmd = ["logs", _positional(name)]
        if container:
            cmd += ["-c", container]
        if tail_lines is not None:
            cmd.append(f"--tail={tail_lines}")
        return await kubectl(cmd, strip=False, **self._opts(namespace))

    # -- cluster-scoped ------------------------------------------------------

    async def list_namespaces(self) -> list[dict]:
        return await self._list("namespaces")

    async def list_nodes(self, label_selector: str | None = None) -> list[dict]:
        return await self._list("nodes", label_selector=label_selector)

    async def get_node(self, name: str) -> dict:
        return await self._get("node", name)
