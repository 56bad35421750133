"""
Async kubectl wrapper.

Uses asyncio.create_subprocess_exec, so no shell is involved. Callers pass
resource names, selectors and flags as explicit list elements, never
interpolated into a shell string.

Safety features:
  - Context allowlist (K8S_MCP_ALLOWED_CONTEXTS)
  - Concurrency semaphore to limit parallel subprocess count
  - Enriched error messages for common failure modes
  - Connectivity failures raised as ClusterUnreachableError
"""

from __future__ import annotations

import asyncio
import json
from typing import Sequence


KUBECTL_TIMEOUT = 60  # seconds
MAX_OUTPUT_BYTES = 10 * 1024 * 1024  # 10 MB
MAX_CONCURRENT_KUBECTL = 10


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class KubectlError(Exception):
    """Raised when kubectl exits with a non-zero status."""


class ClusterUnreachableError(KubectlError):
    """Raised when the API server could not be reached at all."""


# ---------------------------------------------------------------------------
# Safety: context allowlist
# ---------------------------------------------------------------------------

def check_context_allowed(context: str | None, allowed: Sequence[str] = ()) -> None:
    """Raise if context is not in the allowlist (when configured).

    With an allowlist configured, an unnamed context is rejected.
    """
    if not allowed:
        return
    if not context:
        raise KubectlError(
            f"K8S_MCP_ALLOWED_CONTEXTS is set to {list(allowed)} but no context is selected. "
            f"Set KUBE_CONTEXT to one of the allowed contexts."
        )
    if context not in allowed:
        raise KubectlError(
            f"Context '{context}' is not in the allowed list: {list(allowed)}. "
            f"Set K8S_MCP_ALLOWED_CONTEXTS to adjust."
        )


# ---------------------------------------------------------------------------
# Error enrichment
# ---------------------------------------------------------------------------

_ERROR_HINTS = {
    "error: You must be logged in": (
        "Authentication failed. Your kubeconfig credentials may have expired."
    ),
    "the server has asked for the client to provide credentials": (
        "Cluster rejected credentials. Token may be expired."
    ),
    "exec plugin: invalid apiVersion": (
        "Exec-based auth plugin version mismatch. Check your kubeconfig's exec provider."
    ),
    "unable to parse requirement": (
        "Malformed label selector. Use the form 'key=value,other!=value'."
    ),
}

_UNREACHABLE_PATTERNS = (
    "Unable to connect to the server",
    "was refused",
    "no such host",
    "i/o timeout",
    "dial tcp",
    "TLS handshake timeout",
)


def _enrich_error(raw_stderr: str) -> str:
    """Prepend an actionable hint to common kubectl errors."""
    for pattern, hint in _ERROR_HINTS.items():
        if pattern in raw_stderr:
            return f"{hint}\n\nkubectl stderr: {raw_stderr}"
    return raw_stderr


def _is_unreachable(raw_stderr: str) -> bool:
    return any(pattern in raw_stderr for pattern in _UNREACHABLE_PATTERNS)


# ---------------------------------------------------------------------------
# Concurrency control
# ---------------------------------------------------------------------------

_semaphore: asyncio.Semaphore | None = None


def _get_semaphore() -> asyncio.Semaphore:
    global _semaphore
    if _semaphore is None:
        _semaphore = asyncio.Semaphore(MAX_CONCURRENT_KUBECTL)
    return _semaphore


# ---------------------------------------------------------------------------
# Core functions
# ---------------------------------------------------------------------------

def _build_args(
    args: Sequence[str],
    kubeconfig: str | None = None,
    context: str | None = None,
    namespace: str | None = None,
) -> list[str]:
    prefix: list[str] = []
    if kubeconfig:
        prefix += ["--kubeconfig", kubeconfig]
    if context:
        prefix += ["--context", context]
    if namespace:
        prefix += ["--namespace", namespace]
    return prefix + list(args)


async def kubectl(
    args: Sequence[str],
    *,
    kubeconfig: str | None = None,
    context: str | None = None,
    namespace: str | None = None,
    timeout_override: int | None = None,
    strip: bool = True,
) -> str:
    """Run kubectl and return stdout as a string.

    With ``strip=False`` the output is returned exactly as kubectl wrote it,
    which is what log retrieval needs.
    """
    full_args = _build_args(args, kubeconfig=kubeconfig, context=context, namespace=namespace)
    timeout = timeout_override or KUBECTL_TIMEOUT

    async with _get_semaphore():
        try:
            proc = await asyncio.create_subprocess_exec(
                "kubectl",
                *full_args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise KubectlError(
                f"kubectl binary not found or not executable: {exc}. "
                "Install kubectl and ensure it is on PATH."
            ) from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise ClusterUnreachableError(
                f"kubectl timed out after {timeout}s: kubectl {' '.join(full_args)}"
            )

    if len(stdout) > MAX_OUTPUT_BYTES:
        stdout = stdout[:MAX_OUTPUT_BYTES] + b"\n[... output truncated at 10 MB ...]"

    if proc.returncode != 0:
        err = stderr.decode(errors="replace").strip()
        if not err:
            raise KubectlError(f"kubectl exited with code {proc.returncode}")
        if _is_unreachable(err):
            raise ClusterUnreachableError(err)
        raise KubectlError(_enrich_error(err))

    out = stdout.decode(errors="replace")
    return out.strip() if strip else out


def parse_json(output: str) -> dict:
    """Decode kubectl JSON output, mapping decode failures to KubectlError."""
    try:
        data = json.loads(output)
    except json.JSONDecodeError:
        raise KubectlError(
            "Response too large to parse as JSON (likely truncated at 10 MB). "
            "Try narrowing your query with a namespace or label selector."
        )
    if not isinstance(data, dict):
        raise KubectlError(f"Expected a JSON object from kubectl, got {type(data).__name__}")
    return data


async def kubectl_json(
    args: Sequence[str],
    *,
    kubeconfig: str | None = None,
    context: str | None = None,
    namespace: str | None = None,
    timeout_override: int | None = None,
) -> dict:
    """Run kubectl with -o json and parse the result."""
    output = await kubectl(
        list(args) + ["-o", "json"],
        kubeconfig=kubeconfig,
        context=context,
        namespace=namespace,
        timeout_override=timeout_override,
    )
    return parse_json(output)
