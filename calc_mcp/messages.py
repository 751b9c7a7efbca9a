"""JSON-RPC message values exchanged over the stdio transport.

``Request`` is decoded from one inbound line; ``Response`` is serialised to
one outbound line. Both are frozen: handlers build a fresh ``Response`` per
request instead of filling in a shared object.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from calc_mcp.exceptions import InvalidRequestError

JSONRPC_VERSION = "2.0"
NOTIFICATION_PREFIX = "notifications/"


@dataclass(frozen=True)
class Request:
    """A decoded request or notification.

    ``has_id`` records whether the ``id`` member was present at all, so an
    explicit ``"id": null`` can be told apart from a missing id.
    """

    method: str
    id: Any = None
    has_id: bool = False
    params: Any = None
    jsonrpc: str = JSONRPC_VERSION

    @classmethod
    def from_message(cls, msg: dict[str, Any]) -> Request:
        method = msg.get("method")
        if not isinstance(method, str):
            raise InvalidRequestError("Invalid Request: 'method' must be a string")
        return cls(
            method=method,
            id=msg.get("id"),
            has_id="id" in msg,
            params=msg.get("params"),
            jsonrpc=str(msg.get("jsonrpc", JSONRPC_VERSION)),
        )

    @property
    def is_notification(self) -> bool:
        return self.method.startswith(NOTIFICATION_PREFIX)


@dataclass(frozen=True)
class ErrorPayload:
    code: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


@dataclass(frozen=True)
class Response:
    """A response envelope carrying exactly one of ``result`` or ``error``."""

    id: Any = None
    has_id: bool = False
    result: Any = None
    error: ErrorPayload | None = None

    def __post_init__(self) -> None:
        if (self.result is None) == (self.error is None):
            raise ValueError("Response needs exactly one of result or error")

    @classmethod
    def success(cls, request: Request, result: dict[str, Any]) -> Response:
        return cls(id=request.id, has_id=request.has_id, result=result)

    @classmethod
    def failure(cls, request: Request, code: int, message: str) -> Response:
        return cls(id=request.id, has_id=request.has_id, error=ErrorPayload(code, message))

    @classmethod
    def error_for_id(cls, req_id: Any, code: int, message: str) -> Response:
        """Error response for a line that never became a ``Request``."""
        return cls(id=req_id, has_id=True, error=ErrorPayload(code, message))

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION}
        if self.has_id:
            out["id"] = self.id
        if self.error is not None:
            out["error"] = self.error.to_dict()
        else:
            out["result"] = self.result
        return out
