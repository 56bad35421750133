"""
Shared fixtures for the test suite.
"""

from __future__ import annotations

import copy
from unittest.mock import AsyncMock, MagicMock

import pytest

from k8s_inspect.dispatcher import Dispatcher


# ---------------------------------------------------------------------------
# Subprocess mock factory
# ---------------------------------------------------------------------------

def make_proc(stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0):
    """Mimics the object returned by asyncio.create_subprocess_exec."""
    proc = MagicMock()
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    proc.kill = MagicMock()
    proc.wait = AsyncMock(return_value=returncode)
    return proc


@pytest.fixture
def mock_run(monkeypatch):
    """
    Patches asyncio.create_subprocess_exec with a fake that pops responses
    from a queue and records the argv of every call.

    Usage:
        calls = mock_run((b"output", b"", 0))
        mock_run((b"out1", b"", 0), (b"out2", b"", 0))  # multiple calls
    """
    responses: list[tuple[bytes, bytes, int]] = []
    calls: list[tuple[str, ...]] = []

    async def fake_exec(*args, **kwargs):
        assert responses, f"Unexpected kubectl call: {args}"
        calls.append(args)
        stdout, stderr, rc = responses.pop(0)
        return make_proc(stdout, stderr, rc)

    monkeypatch.setattr("asyncio.create_subprocess_exec", fake_exec)

    def queue(*items: tuple[bytes, bytes, int]):
        responses.extend(items)
        return calls

    return queue


# ---------------------------------------------------------------------------
# Recording upstream stub
# ---------------------------------------------------------------------------

class StubClient:
    """Stands in for ClusterClient.

    ``responses`` maps method name to a return value or an exception to raise.
    Every call is recorded in ``calls`` as (method, args).
    """

    UPSTREAM_METHODS = (
        "get_cluster_metadata",
        "list_pods",
        "list_services",
        "list_deployments",
        "list_configmaps",
        "get_pod",
        "get_service",
        "get_deployment",
        "get_configmap",
        "get_pod_logs",
        "list_namespaces",
        "list_nodes",
        "get_node",
    )

    def __init__(self, context: str | None = "minikube", **responses):
        self.context = context
        self.responses = responses
        self.calls: list[tuple[str, tuple]] = []

    def __getattr__(self, method: str):
        if method not in self.UPSTREAM_METHODS:
            raise AttributeError(method)

        async def call(*args):
            self.calls.append((method, args))
            value = self.responses.get(method)
            if isinstance(value, BaseException):
                raise value
            return copy.deepcopy(value)

        return call


@pytest.fixture
def make_dispatcher():
    def build(**responses):
        client = StubClient(**responses)
        return Dispatcher(client), client

    return build


# ---------------------------------------------------------------------------
# Sample kubectl JSON objects
# ---------------------------------------------------------------------------

POD_ITEMS = [
    {
        "metadata": {
            "name": "app-abc",
            "namespace": "default",
            "creationTimestamp": "2024-05-01T10:00:00Z",
            "labels": {"app": "web"},
        },
        "spec": {"nodeName": "node-1", "containers": [{"name": "app", "image": "nginx:1.25"}]},
        "status": {"phase": "Running", "podIP": "10.244.0.12", "hostIP": "192.168.49.2"},
    },
    {
        "metadata": {"name": "app-pending", "namespace": "default", "creationTimestamp": "2024-05-01T10:05:00Z"},
        "spec": {"containers": [{"name": "app", "image": "nginx:1.25"}]},
        "status": {"phase": "Pending", "reason": "Unschedulable"},
    },
    {
        "metadata": {"name": "worker-0", "namespace": "default", "creationTimestamp": "2024-05-02T08:00:00Z"},
        "spec": {"nodeName": "node-2"},
        "status": {"phase": "Running", "podIP": "10.244.1.7"},
    },
]

SERVICE_ITEMS = [
    {
        "metadata": {"name": "web", "namespace": "default", "creationTimestamp": "2024-05-01T09:00:00Z"},
        "spec": {
            "type": "ClusterIP",
            "clusterIP": "10.96.14.3",
            "ports": [{"port": 80, "targetPort": 8080, "protocol": "TCP"}],
            "selector": {"app": "web"},
        },
    },
]

DEPLOYMENT_ITEMS = [
    {
        "metadata": {"name": "healthy-app", "namespace": "default", "creationTimestamp": "2024-04-30T12:00:00Z"},
        "spec": {"replicas": 3, "selector": {"matchLabels": {"app": "healthy"}}},
        "status": {"readyReplicas": 3, "availableReplicas": 3},
    },
    {
        "metadata": {"name": "broken-app", "namespace": "default"},
        "spec": {"replicas": 2, "selector": {"matchLabels": {"app": "broken"}}},
        "status": {"unavailableReplicas": 2},
    },
]

NAMESPACE_ITEMS = [
    {"metadata": {"name": "default", "creationTimestamp": "2024-04-01T00:00:00Z"}, "status": {"phase": "Active"}},
    {"metadata": {"name": "kube-system", "creationTimestamp": "2024-04-01T00:00:00Z"}, "status": {"phase": "Active"}},
    {"metadata": {"name": "old-team"}, "status": {"phase": "Terminating"}},
]

NODE_ITEMS = [
    {
        "metadata": {
            "name": "node-ready",
            "creationTimestamp": "2024-04-01T00:00:00Z",
            "labels": {
                "kubernetes.io/hostname": "node-ready",
                "node-role.kubernetes.io/control-plane": "",
                "node-role.kubernetes.io/master": "",
            },
        },
        "status": {
            "conditions": [
                {"type": "MemoryPressure", "status": "False"},
                {"type": "Ready", "status": "True", "reason": "KubeletReady"},
            ],
            "nodeInfo": {
                "kubeletVersion": "v1.29.2",
                "osImage": "Ubuntu 22.04.4 LTS",
                "kernelVersion": "6.5.0-1017-aws",
            },
        },
    },
    {
        "metadata": {"name": "node-notready", "labels": {"kubernetes.io/hostname": "node-notready"}},
        "status": {
            "conditions": [
                {"type": "Ready", "status": "False", "reason": "KubeletNotReady", "message": "PLEG is not healthy"},
            ],
        },
    },
    {
        "metadata": {"name": "node-unknown"},
        "status": {"conditions": [{"type": "DiskPressure", "status": "False"}]},
    },
]

CONFIGMAP_ITEMS = [
    {
        "metadata": {"name": "app-config", "namespace": "default", "creationTimestamp": "2024-05-01T09:30:00Z"},
        "data": {"LOG_LEVEL": "debug", "settings.yaml": "feature: on\nsecret_ish: value\n"},
    },
    {
        "metadata": {"name": "empty-config", "namespace": "default"},
        "data": {},
    },
    {
        "metadata": {"name": "binary-only", "namespace": "default"},
        "binaryData": {"blob": "AAEC"},
    },
]

POD_DETAIL = {
    "apiVersion": "v1",
    "kind": "Pod",
    "metadata": {
        "name": "app-abc",
        "namespace": "default",
        "managedFields": [{"manager": "kubectl", "operation": "Update"}],
        "annotations": {
            "kubectl.kubernetes.io/last-applied-configuration": "{...}",
            "team": "platform",
        },
    },
    "spec": {"nodeName": "node-1"},
    "status": {"phase": "Running"},
}

KUBECONFIG_VIEW = {
    "apiVersion": "v1",
    "kind": "Config",
    "current-context": "minikube",
    "contexts": [{"name": "minikube", "context": {"cluster": "minikube", "user": "minikube"}}],
    "clusters": [
        {
            "name": "minikube",
            "cluster": {
                "server": "https://192.168.49.2:8443",
                "certificate-authority-data": "DATA+OMITTED",
            },
        }
    ],
    "users": [{"name": "minikube", "user": {"client-key-data": "DATA+OMITTED"}}],
}

API_RESOURCE_LIST = {
    "kind": "APIResourceList",
    "groupVersion": "v1",
    "resources": [
        {"name": "pods", "singularName": "pod", "namespaced": True, "kind": "Pod", "verbs": ["get", "list", "watch"]},
        {"name": "pods/log", "singularName": "", "namespaced": True, "kind": "Pod", "verbs": ["get"]},
        {"name": "nodes", "singularName": "node", "namespaced": False, "kind": "Node", "verbs": ["get", "list"]},
    ],
}

CLUSTER_METADATA = {"config": KUBECONFIG_VIEW, "apiResourceList": API_RESOURCE_LIST}
