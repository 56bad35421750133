"""
Typed commands: one frozen dataclass per operation.

``decode`` is the only place the untyped MCP argument bag is inspected. It
checks required fields, applies defaults and type-checks values, returning
either a command or a caller-error ``Failure``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

from k8s_inspect.catalog import FieldKind, InputField, OperationDescriptor
from k8s_inspect.results import ErrorKind, Failure


@dataclass(frozen=True)
class GetClusterInfo:
    pass


@dataclass(frozen=True)
class ListPods:
    namespace: str
    label_selector: str | None = None


@dataclass(frozen=True)
class ListServices:
    namespace: str
    label_selector: str | None = None


@dataclass(frozen=True)
class ListDeployments:
    namespace: str
    label_selector: str | None = None


@dataclass(frozen=True)
class ListConfigMaps:
    namespace: str
    label_selector: str | None = None


@dataclass(frozen=True)
class DescribePod:
    name: str
    namespace: str


@dataclass(frozen=True)
class DescribeService:
    name: str
    namespace: str


@dataclass(frozen=True)
class DescribeDeployment:
    name: str
    namespace: str


@dataclass(frozen=True)
class DescribeConfigMap:
    name: str
    namespace: str


@dataclass(frozen=True)
class GetPodLogs:
    name: str
    namespace: str
    container: str | None = None
    tail_lines: int | None = None


@dataclass(frozen=True)
class ListNamespaces:
    pass


@dataclass(frozen=True)
class ListNodes:
    label_selector: str | None = None


@dataclass(frozen=True)
class DescribeNode:
    name: str


Command = Union[
    GetClusterInfo,
    ListPods,
    ListServices,
    ListDeployments,
    ListConfigMaps,
    DescribePod,
    DescribeService,
    DescribeDeployment,
    DescribeConfigMap,
    GetPodLogs,
    ListNamespaces,
    ListNodes,
    DescribeNode,
]

COMMANDS: dict[str, type] = {
    "get_cluster_info": GetClusterInfo,
    "list_pods": ListPods,
    "list_services": ListServices,
    "list_deployments": ListDeployments,
    "list_configmaps": ListConfigMaps,
    "describe_pod": DescribePod,
    "describe_service": DescribeService,
    "describe_deployment": DescribeDeployment,
    "describe_configmap": DescribeConfigMap,
    "get_pod_logs": GetPodLogs,
    "list_namespaces": ListNamespaces,
    "list_nodes": ListNodes,
    "describe_node": DescribeNode,
}

# Wire names that differ from the Python attribute names.
_ATTRS = {
    "labelSelector": "label_selector",
    "tailLines": "tail_lines",
}

# Values kubectl receives as resource names or flag values; a leading dash
# would be parsed as a flag.
_IDENTIFIERS = frozenset({"name", "namespace", "container"})


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _type_error(field: InputField, value: Any) -> str | None:
    """Return a caller-facing message if ``value`` does not fit ``field``."""
    if field.kind is FieldKind.NUMBER:
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return f"{field.name} must be a number"
        if isinstance(value, float) and not value.is_integer():
            return f"{field.name} must be a whole number"
        if value < 0:
            return f"{field.name} must not be negative"
        return None
    if not isinstance(value, str):
        return f"{field.name} must be a string"
    if field.name in _IDENTIFIERS and value.startswith("-"):
        return f"{field.name} must not start with '-'"
    if field.kind is FieldKind.ENUM and value not in field.choices:
        return f"{field.name} must be one of: {', '.join(field.choices)}"
    return None


def decode(descriptor: OperationDescriptor, arguments: Mapping[str, Any] | None) -> Union[Command, Failure]:
    """Build the typed command for ``descriptor`` from a raw argument bag."""
    args = arguments or {}
    values: dict[str, Any] = {}
    for field in descriptor.fields:
        raw = args.get(field.name)
        if _is_blank(raw):
            if field.required:
                return Failure(f"{field.description} is required", ErrorKind.CALLER_ERROR)
            value = field.default
        else:
            problem = _type_error(field, raw)
            if problem:
                return Failure(problem, ErrorKind.CALLER_ERROR)
            value = int(raw) if field.kind is FieldKind.NUMBER else raw
        values[_ATTRS.get(field.name, field.name)] = value
    return COMMANDS[descriptor.name](**values)
