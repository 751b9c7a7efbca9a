"""Exception hierarchy for the calculator MCP server.

Protocol-level failures inherit from ``McpError`` and carry the JSON-RPC
error ``code`` they map to, so the dispatcher can turn any of them into an
error response with a single ``except McpError``.

Tool-level failures inherit from ``ToolError`` and stay independent of the
wire format; the ``tools/call`` handler translates them.
"""

from __future__ import annotations

# JSON-RPC 2.0 error codes
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class McpError(Exception):
    """Base exception for failures reported to the client as JSON-RPC errors."""

    code: int = INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRequestError(McpError):
    """Raised when a decoded message is not a usable request object."""

    code = INVALID_REQUEST


class MethodNotFoundError(McpError):
    """Raised when no capability is registered for a method name."""

    code = METHOD_NOT_FOUND

    def __init__(self, method: str) -> None:
        super().__init__(f"Method not found: {method}")
        self.method = method


class InvalidParamsError(McpError):
    """Raised when request params are missing or unusable."""

    code = INVALID_PARAMS


class InternalError(McpError):
    """Raised for unexpected failures while serving a request."""

    code = INTERNAL_ERROR


# ---------------------------------------------------------------------------
# Tool executor errors
# ---------------------------------------------------------------------------


class ToolError(Exception):
    """Base exception for tool execution failures."""


class ToolArgumentError(ToolError):
    """Raised for an unknown tool name or bad/missing tool arguments."""

    def __init__(self, message: str, *, tool_name: str | None = None, argument: str | None = None) -> None:
        super().__init__(message)
        self.tool_name = tool_name
        self.argument = argument
