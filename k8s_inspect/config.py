"""
Runtime configuration, read once from the environment at startup.

Environment variables:
  KUBECONFIG_PATH=/path/to/config  - kubeconfig passed to kubectl (default: kubectl's own lookup)
  KUBE_CONTEXT=name                - kubeconfig context to use (default: current context)
  K8S_MCP_ALLOWED_CONTEXTS=a,b     - restrict which kubeconfig contexts can be used (needs KUBE_CONTEXT)
  K8S_MCP_KUBECTL_TIMEOUT=60       - per-call kubectl deadline in seconds
  K8S_MCP_LOG_LEVEL=INFO           - log level (logs always go to stderr)
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping

from k8s_inspect.kubectl import KUBECTL_TIMEOUT

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _csv(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    kubeconfig: str | None = None
    context: str | None = None
    allowed_contexts: tuple[str, ...] = ()
    kubectl_timeout: int = KUBECTL_TIMEOUT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ

        raw_timeout = env.get("K8S_MCP_KUBECTL_TIMEOUT", "").strip()
        timeout = KUBECTL_TIMEOUT
        if raw_timeout:
            timeout = int(raw_timeout)
            if timeout <= 0:
                raise ValueError(f"K8S_MCP_KUBECTL_TIMEOUT must be positive, got {timeout}")

        context = env.get("KUBE_CONTEXT") or None
        allowed = _csv(env.get("K8S_MCP_ALLOWED_CONTEXTS", ""))
        if allowed and context is None:
            raise ValueError("K8S_MCP_ALLOWED_CONTEXTS requires KUBE_CONTEXT to name one of the allowed contexts")

        return cls(
            kubeconfig=env.get("KUBECONFIG_PATH") or None,
            context=context,
            allowed_contexts=allowed,
            kubectl_timeout=timeout,
            log_level=(env.get("K8S_MCP_LOG_LEVEL") or "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Send all log records to stderr; stdout carries the MCP stdio stream."""
    logging.basicConfig(stream=sys.stderr, level=level, format=LOG_FORMAT, force=True)
