"""
Kubernetes inspection MCP server

Exposes 13 read-only kubectl-backed tools over MCP stdio transport:
  • Cluster   - get_cluster_info, list_namespaces, list_nodes, describe_node
  • Workloads - list/describe pods, services, deployments; get_pod_logs
  • Config    - list_configmaps, describe_configmap

Environment variables are documented in k8s_inspect.config.

Run with:
    python -m k8s_inspect.server
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import sys

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, TextContent, Tool, ToolAnnotations

from k8s_inspect import catalog
from k8s_inspect.client import ClusterClient
from k8s_inspect.config import Settings, configure_logging
from k8s_inspect.dispatcher import Dispatcher
from k8s_inspect.formatters import to_call_tool_result

log = logging.getLogger(__name__)

_RO_ANNOTATIONS = ToolAnnotations(readOnlyHint=True, destructiveHint=False, openWorldHint=True)


def build_tools() -> list[Tool]:
    return [
        Tool(
            name=op.name,
            description=op.description,
            inputSchema=op.input_schema(),
            annotations=_RO_ANNOTATIONS,
        )
        for op in catalog.list_operations()
    ]


async def handle_call_tool(dispatcher: Dispatcher, name: str, arguments: dict | None) -> CallToolResult:
    """Invoke one tool; never lets an exception escape to the transport."""
    try:
        result = await dispatcher.invoke(name, arguments or {})
    except Exception as exc:  # noqa: BLE001
        log.exception("unexpected error in tool %s", name)
        return CallToolResult(
            content=[TextContent(type="text", text=f"Unexpected error: {exc}")],
            isError=True,
        )
    return to_call_tool_result(result)


def create_server(dispatcher: Dispatcher) -> Server:
    server = Server("kubernetes-inspect")
    tools = build_tools()

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return tools

    # Arguments are validated by the dispatcher, which owns the error wording.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict | None) -> CallToolResult:
        return await handle_call_tool(dispatcher, name, arguments)

    return server


# ---------------------------------------------------------------------------
# Startup preflight
# ---------------------------------------------------------------------------

async def _preflight(client: ClusterClient) -> None:
    """Check kubectl availability and cluster connectivity before serving."""
    if not shutil.which("kubectl"):
        log.critical("kubectl not found on PATH. Install kubectl and try again.")
        sys.exit(1)

    if await client.cluster_reachable():
        log.info("Cluster connectivity: OK")
    else:
        log.warning("Cluster unreachable. Tools will fail until a valid context is configured.")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

async def _run(settings: Settings) -> None:
    client = ClusterClient.from_settings(settings)
    server = create_server(Dispatcher(client))
    log.info(
        "kubernetes inspect MCP server starting, %d tools registered (context: %s)",
        len(catalog.list_operations()),
        settings.context or "current",
    )
    await _preflight(client)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    asyncio.run(_run(settings))


if __name__ == "__main__":
    main()
