"""
Dispatcher: resolve, validate, invoke, project, envelope.

Each invocation makes at most one upstream read and is never retried. The
dispatcher holds only the immutable client handed to it, so overlapping
invocations cannot interfere with each other.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Mapping

from k8s_inspect import catalog
from k8s_inspect.client import ClusterClient
from k8s_inspect.commands import (
    DescribeConfigMap,
    DescribeDeployment,
    DescribeNode,
    DescribePod,
    DescribeService,
    GetClusterInfo,
    GetPodLogs,
    ListConfigMaps,
    ListDeployments,
    ListNamespaces,
    ListNodes,
    ListPods,
    ListServices,
    decode,
)
from k8s_inspect.formatters import dump_json, unreachable_message
from k8s_inspect.kubectl import ClusterUnreachableError, KubectlError
from k8s_inspect.projections import (
    project_cluster_info,
    project_configmap,
    project_deployment,
    project_detail,
    project_namespace,
    project_node,
    project_pod,
    project_service,
)
from k8s_inspect.results import ErrorKind, Failure, InvocationResult, Success

log = logging.getLogger(__name__)


def _each(projector: Callable[[Any], dict]) -> Callable[[list], list[dict]]:
    return lambda items: [projector(item) for item in items]


class Dispatcher:
    def __init__(self, client: ClusterClient) -> None:
        self._client = client
        self._routes: dict[type, Callable[[Any], Awaitable[InvocationResult]]] = {
            GetClusterInfo: self._cluster_info,
            ListPods: self._list_pods,
            ListServices: self._list_services,
            ListDeployments: self._list_deployments,
            ListConfigMaps: self._list_configmaps,
            DescribePod: self._describe_pod,
            DescribeService: self._describe_service,
            DescribeDeployment: self._describe_deployment,
            DescribeConfigMap: self._describe_configmap,
            GetPodLogs: self._pod_logs,
            ListNamespaces: self._list_namespaces,
            ListNodes: self._list_nodes,
            DescribeNode: self._describe_node,
        }

    async def invoke(self, name: str, arguments: Mapping[str, Any] | None = None) -> InvocationResult:
        descriptor = catalog.describe(name)
        if descriptor is None:
            return self._failed(name, Failure(f"Unknown tool: {name}", ErrorKind.CALLER_ERROR))

        command = decode(descriptor, arguments)
        if isinstance(command, Failure):
            return self._failed(name, command)

        log.debug("invoking %s with %s", name, command)
        result = await self._routes[type(command)](command)
        if isinstance(result, Failure):
            return self._failed(name, result)
        return result

    def _failed(self, name: str, failure: Failure) -> Failure:
        log.warning("tool %s failed (%s): %s", name, failure.kind.value, failure.message)
        return failure

    # -----------------------------------------------------------------------
    # Upstream call + projection
    # -----------------------------------------------------------------------

    async def _fetch(
        self,
        action: str,
        call: Awaitable[Any],
        project: Callable[[Any], Any] | None,
    ) -> InvocationResult:
        """Await one upstream read, then project and serialize it.

        ``project=None`` passes text through untouched.
        """
        try:
            raw = await call
        except ClusterUnreachableError as exc:
            return Failure(unreachable_message(self._client.context, str(exc)), ErrorKind.UPSTREAM_UNAVAILABLE)
        except KubectlError as exc:
            return Failure(f"Error {action}: {exc}", ErrorKind.UPSTREAM_REJECTED)

        if project is None:
            return Success(raw)
        return Success(dump_json(project(raw)))

    # -----------------------------------------------------------------------
    # Routes
    # -----------------------------------------------------------------------

    async def _cluster_info(self, _cmd: GetClusterInfo) -> InvocationResult:
        return await self._fetch(
            "getting cluster info", self._client.get_cluster_metadata(), project_cluster_info
        )

    async def _list_pods(self, cmd: ListPods) -> InvocationResult:
        return await self._fetch(
            "listing pods",
            self._client.list_pods(cmd.namespace, cmd.label_selector),
            _each(project_pod),
        )

    async def _list_services(self, cmd: ListServices) -> InvocationResult:
        return await self._fetch(
            "listing services",
            self._client.list_services(cmd.namespace, cmd.label_selector),
            _each(project_service),
        )

    async def _list_deployments(self, cmd: ListDeployments) -> InvocationResult:
        return await self._fetch(
            "listing deployments",
            self._client.list_deployments(cmd.namespace, cmd.label_selector),
            _each(project_deployment),
        )

    async def _list_configmaps(self, cmd: ListConfigMaps) -> InvocationResult:
        return await self._fetch(
            "listing configmaps",
            self._client.list_configmaps(cmd.namespace, cmd.label_selector),
            _each(project_configmap),
        )

    async def _describe_pod(self, cmd: DescribePod) -> InvocationResult:
        return await self._fetch(
            "describing pod", self._client.get_pod(cmd.name, cmd.namespace), project_detail
        )

    async def _describe_service(self, cmd: DescribeService) -> InvocationResult:
        return await self._fetch(
            "describing service", self._client.get_service(cmd.name, cmd.namespace), project_detail
        )

    async def _describe_deployment(self, cmd: DescribeDeployment) -> InvocationResult:
        return await self._fetch(
            "describing deployment", self._client.get_deployment(cmd.name, cmd.namespace), project_detail
        )

    async def _describe_configmap(self, cmd: DescribeConfigMap) -> InvocationResult:
        return await self._fetch(
            "describing configmap", self._client.get_configmap(cmd.name, cmd.namespace), project_detail
        )

    async def _pod_logs(self, cmd: GetPodLogs) -> InvocationResult:
        return await self._fetch(
            "getting pod logs",
            self._client.get_pod_logs(cmd.name, cmd.namespace, cmd.container, cmd.tail_lines),
            None,
        )

    async def _list_namespaces(self, _cmd: ListNamespaces) -> InvocationResult:
        return await self._fetch(
            "listing namespaces", self._client.list_namespaces(), _each(project_namespace)
        )

    async def _list_nodes(self, cmd: ListNodes) -> InvocationResult:
        return await self._fetch(
            "listing nodes", self._client.list_nodes(cmd.label_selector), _each(project_node)
        )

    async def _describe_node(self, cmd: DescribeNode) -> InvocationResult:
        return await self._fetch(
            "describing node", self._client.get_node(cmd.name), project_detail
        )

