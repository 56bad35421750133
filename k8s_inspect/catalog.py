"""
Tool catalog: the 13 read-only operations and their input contracts.

Operations:
  get_cluster_info     - current context, cluster endpoint, core API resources
  list_pods            - pods in a namespace (optionally label-filtered)
  list_services        - services in a namespace
  list_deployments     - deployments in a namespace
  describe_pod         - full pod object
  describe_service     - full service object
  describe_deployment  - full deployment object
  get_pod_logs         - raw pod log text
  list_namespaces      - all namespaces
  list_nodes           - nodes with readiness and roles
  describe_node        - full node object
  list_configmaps      - configmaps (key names only, never values)
  describe_configmap   - full configmap object
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class FieldKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    # Enum string fields: the schema and decoder handle them; no current tool declares one.
    ENUM = "enum"


@dataclass(frozen=True)
class InputField:
    name: str
    description: str
    kind: FieldKind = FieldKind.STRING
    required: bool = False
    default: Any = None
    choices: tuple[str, ...] = ()

    def schema(self) -> dict:
        if self.kind is FieldKind.ENUM:
            prop: dict = {"type": "string", "enum": list(self.choices)}
        else:
            prop = {"type": self.kind.value}
        prop["description"] = self.description
        if self.default is not None:
            prop["default"] = self.default
        return prop


@dataclass(frozen=True)
class OperationDescriptor:
    name: str
    description: str
    fields: tuple[InputField, ...] = ()

    @property
    def required(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields if f.required)

    def input_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {f.name: f.schema() for f in self.fields},
            "required": list(self.required),
        }


# ---------------------------------------------------------------------------
# Shared field definitions
# ---------------------------------------------------------------------------

DEFAULT_NAMESPACE = "default"

_NAMESPACE = InputField(
    "namespace",
    'Kubernetes namespace (default: "default")',
    default=DEFAULT_NAMESPACE,
)


def _selector(what: str) -> InputField:
    return InputField("labelSelector", f'Label selector to filter {what} (e.g. "app=nginx")')


def _name(label: str) -> InputField:
    # The description doubles as the "<label> is required" validation message.
    return InputField("name", label, required=True)


def _list_op(plural: str, description: str | None = None) -> OperationDescriptor:
    return OperationDescriptor(
        name=f"list_{plural}",
        description=description or f"List {plural} in a namespace",
        fields=(_NAMESPACE, _selector(plural)),
    )


def _describe_op(kind: str, label: str) -> OperationDescriptor:
    return OperationDescriptor(
        name=f"describe_{kind}",
        description=f"Get detailed information about a {kind}",
        fields=(_name(f"{label} name"), _NAMESPACE),
    )


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

_OPERATIONS: tuple[OperationDescriptor, ...] = (
    OperationDescriptor(
        name="get_cluster_info",
        description=(
            "Get information about the current Kubernetes cluster: active context, "
            "API server endpoint, and the core API resources it serves."
        ),
    ),
    _list_op("pods"),
    _list_op("services"),
    _list_op("deployments"),
    _describe_op("pod", "Pod"),
    _describe_op("service", "Service"),
    _describe_op("deployment", "Deployment"),
    OperationDescriptor(
        name="get_pod_logs",
        description="Get logs from a pod",
        fields=(
            _name("Pod name"),
            _NAMESPACE,
            InputField("container", "Container name (if pod has multiple containers)"),
            InputField(
                "tailLines",
                "Number of lines to return from the end of the logs",
                kind=FieldKind.NUMBER,
            ),
        ),
    ),
    OperationDescriptor(
        name="list_namespaces",
        description="List all namespaces in the cluster",
    ),
    OperationDescriptor(
        name="list_nodes",
        description="List all nodes in the cluster with readiness, roles, and kubelet version",
        fields=(
            InputField(
                "labelSelector",
                'Label selector to filter nodes (e.g. "kubernetes.io/role=master")',
            ),
        ),
    ),
    OperationDescriptor(
        name="describe_node",
        description="Get detailed information about a node",
        fields=(_name("Node name"),),
    ),
    _list_op(
        "configmaps",
        "List configmaps in a namespace. Shows key names only, never the data values.",
    ),
    _describe_op("configmap", "ConfigMap"),
)

_BY_NAME: dict[str, OperationDescriptor] = {op.name: op for op in _OPERATIONS}


def list_operations() -> tuple[OperationDescriptor, ...]:
    return _OPERATIONS


def describe(name: str) -> OperationDescriptor | None:
    """Exact, case-sensitive lookup. Returns None for unknown names."""
    return _BY_NAME.get(name)
