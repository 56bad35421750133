"""Shared output formatting helpers."""

from __future__ import annotations

import json
from typing import Any

from mcp.types import CallToolResult, TextContent

from k8s_inspect.results import Failure, InvocationResult


def dump_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def bullet_list(items: list[str]) -> str:
    return "\n".join(f"  {i}. {item}" for i, item in enumerate(items, 1))


_UNREACHABLE_REASONS = [
    "The cluster is not running or not reachable from this environment",
    "The kubeconfig points at a cluster that is not available",
    "The cluster requires a proxy or VPN connection",
    "Network issues are preventing the connection",
]


def unreachable_message(context: str | None, detail: str) -> str:
    """Explain a connectivity failure with remediation hints."""
    target = f"context '{context}'" if context else "the current context"
    return (
        f"Unable to connect to the Kubernetes cluster for {target}.\n\n"
        f"This could be due to one of the following reasons:\n"
        f"{bullet_list(_UNREACHABLE_REASONS)}\n\n"
        f"Please check your Kubernetes configuration and network connectivity.\n\n"
        f"Details: {detail}"
    )


def to_call_tool_result(result: InvocationResult) -> CallToolResult:
    """Convert an invocation outcome into the MCP wire envelope."""
    if isinstance(result, Failure):
        return CallToolResult(
            content=[TextContent(type="text", text=result.message)],
            isError=True,
        )
    return CallToolResult(
        content=[TextContent(type="text", text=result.payload)],
        isError=False,
    )
