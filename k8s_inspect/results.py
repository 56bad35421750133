"""Invocation outcomes, converted to the MCP wire shape only in server.py."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class ErrorKind(str, Enum):
    CALLER_ERROR = "caller_error"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    UPSTREAM_REJECTED = "upstream_rejected"


@dataclass(frozen=True)
class Success:
    payload: str


@dataclass(frozen=True)
class Failure:
    message: str
    kind: ErrorKind = ErrorKind.UPSTREAM_REJECTED


InvocationResult = Union[Success, Failure]
