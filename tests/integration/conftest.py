"""
Integration test fixtures: requires a live cluster reachable through kubectl.

Set KUBE_CONTEXT to pick the context (default: minikube).
"""

from __future__ import annotations

import os
import subprocess

import pytest

LIVE_CONTEXT = os.environ.get("KUBE_CONTEXT", "minikube")


def _cluster_reachable() -> bool:
    try:
        result = subprocess.run(
            ["kubectl", "cluster-info", f"--context={LIVE_CONTEXT}"],
            capture_output=True,
            timeout=5,
        )
        return result.returncode == 0
    except (OSError, subprocess.SubprocessError):
        return False


skip_no_cluster = pytest.mark.skipif(
    not _cluster_reachable(),
    reason=f"cluster context {LIVE_CONTEXT!r} not reachable, skipping integration tests",
)
