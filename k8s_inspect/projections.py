"""
Projections from raw Kubernetes objects to small, stable records.

Every projector tolerates malformed input: a field that cannot be read
becomes ``None`` instead of raising.
"""

from __future__ import annotations

import copy
from typing import Any

NODE_ROLE_PREFIX = "node-role.kubernetes.io/"
LAST_APPLIED_ANNOTATION = "kubectl.kubernetes.io/last-applied-configuration"


def _dig(obj: Any, *path: str) -> Any:
    """Walk nested dicts, returning None as soon as a step is missing."""
    for key in path:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj


def _meta(obj: Any) -> tuple[Any, Any, Any]:
    return (
        _dig(obj, "metadata", "name"),
        _dig(obj, "metadata", "namespace"),
        _dig(obj, "metadata", "creationTimestamp"),
    )


# ---------------------------------------------------------------------------
# List projections
# ---------------------------------------------------------------------------

def project_pod(pod: Any) -> dict:
    name, namespace, created = _meta(pod)
    return {
        "name": name,
        "namespace": namespace,
        "status": _dig(pod, "status", "phase"),
        "ip": _dig(pod, "status", "podIP"),
        "node": _dig(pod, "spec", "nodeName"),
        "creationTimestamp": created,
    }


def project_service(svc: Any) -> dict:
    name, namespace, created = _meta(svc)
    return {
        "name": name,
        "namespace": namespace,
        "type": _dig(svc, "spec", "type"),
        "clusterIP": _dig(svc, "spec", "clusterIP"),
        "ports": _dig(svc, "spec", "ports"),
        "selector": _dig(svc, "spec", "selector"),
        "creationTimestamp": created,
    }


def project_deployment(dep: Any) -> dict:
    name, namespace, created = _meta(dep)
    return {
        "name": name,
        "namespace": namespace,
        "replicas": {
            "desired": _dig(dep, "spec", "replicas"),
            "available": _dig(dep, "status", "availableReplicas"),
            "ready": _dig(dep, "status", "readyReplicas"),
        },
        "selector": _dig(dep, "spec", "selector"),
        "creationTimestamp": created,
    }


def project_namespace(ns: Any) -> dict:
    name, _, created = _meta(ns)
    return {
        "name": name,
        "status": _dig(ns, "status", "phase"),
        "creationTimestamp": created,
    }


def node_readiness(conditions: Any) -> str:
    """'Ready' only when a Ready condition reports status "True"."""
    if isinstance(conditions, list):
        for c in conditions:
            if isinstance(c, dict) and c.get("type") == "Ready":
                return "Ready" if c.get("status") == "True" else "NotReady"
    return "NotReady"


def node_roles(labels: Any) -> list[str]:
    if not isinstance(labels, dict):
        return []
    return [
        key[len(NODE_ROLE_PREFIX):]
        for key in labels
        if isinstance(key, str) and key.startswith(NODE_ROLE_PREFIX)
    ]


def project_node(node: Any) -> dict:
    name, _, created = _meta(node)
    return {
        "name": name,
        "status": node_readiness(_dig(node, "status", "conditions")),
        "roles": node_roles(_dig(node, "metadata", "labels")),
        "version": _dig(node, "status", "nodeInfo", "kubeletVersion"),
        "osImage": _dig(node, "status", "nodeInfo", "osImage"),
        "kernelVersion": _dig(node, "status", "nodeInfo", "kernelVersion"),
        "creationTimestamp": created,
    }


def project_configmap(cm: Any) -> dict:
    name, namespace, created = _meta(cm)
    data = _dig(cm, "data")
    return {
        "name": name,
        "namespace": namespace,
        "dataKeys": list(data) if isinstance(data, dict) else [],
        "creationTimestamp": created,
    }


# ---------------------------------------------------------------------------
# Single-object projections
# ---------------------------------------------------------------------------

def project_detail(obj: dict) -> dict:
    """Full object minus server-side bookkeeping (managedFields, last-applied)."""
    if not isinstance(obj, dict):
        return obj
    out = copy.deepcopy(obj)
    metadata = out.get("metadata")
    if isinstance(metadata, dict):
        metadata.pop("managedFields", None)
        annotations = metadata.get("annotations")
        if isinstance(annotations, dict):
            annotations.pop(LAST_APPLIED_ANNOTATION, None)
            if not annotations:
                del metadata["annotations"]
    return out


def _project_api_resource(res: Any) -> dict:
    return {
        "name": _dig(res, "name"),
        "kind": _dig(res, "kind"),
        "namespaced": _dig(res, "namespaced"),
        "verbs": _dig(res, "verbs"),
    }


def project_cluster_info(metadata: dict) -> dict:
    config = _dig(metadata, "config")
    current = _dig(config, "current-context")

    cluster_name = None
    contexts = _dig(config, "contexts")
    if isinstance(contexts, list):
        for ctx in contexts:
            if _dig(ctx, "name") == current:
                cluster_name = _dig(ctx, "context", "cluster")
                break

    cluster: Any = None
    clusters = _dig(config, "clusters")
    if isinstance(clusters, list):
        for entry in clusters:
            if cluster_name is None or _dig(entry, "name") == cluster_name:
                cluster = entry
                break

    resources = _dig(metadata, "apiResourceList", "resources")
    return {
        "currentContext": current,
        "clusterInfo": {
            "name": _dig(cluster, "name"),
            "server": _dig(cluster, "cluster", "server"),
            "insecureSkipTLSVerify": bool(_dig(cluster, "cluster", "insecure-skip-tls-verify")),
        },
        "groupVersion": _dig(metadata, "apiResourceList", "groupVersion"),
        "apiResources": [_project_api_resource(r) for r in resources] if isinstance(resources, list) else [],
    }
