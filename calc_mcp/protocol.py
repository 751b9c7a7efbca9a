"""MCP method dispatcher.

Routes a request to one entry of a static capability table:
- initialize: protocol version, server identity, capability flags
- tools/list: the executor's tool descriptors
- tools/call: runs a tool through the executor
- prompts/list, resources/list: always empty
- ping: liveness check

Methods under ``notifications/`` are logged and never answered. Anything
else gets -32601.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable

from calc_mcp.config import ServerSettings, get_settings
from calc_mcp.exceptions import (
    INTERNAL_ERROR,
    InternalError,
    InvalidParamsError,
    McpError,
    MethodNotFoundError,
    ToolArgumentError,
)
from calc_mcp.messages import NOTIFICATION_PREFIX, Request, Response
from calc_mcp.tools import ToolExecutor

logger = logging.getLogger(__name__)

Handler = Callable[[Request], dict[str, Any]]


class Dispatcher:
    """Maps method names to handlers and wraps their output in envelopes.

    Holds no session state: every ``handle`` call is independent, and calls
    made before ``initialize`` are served normally.
    """

    def __init__(
        self,
        executor: ToolExecutor,
        settings: ServerSettings | None = None,
        *,
        diagnostics: logging.Logger | None = None,
    ) -> None:
        self._executor = executor
        self._settings = settings or get_settings()
        self._log = diagnostics or logger
        self._capabilities: Mapping[str, Handler] = MappingProxyType({
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
            "prompts/list": self._prompts_list,
            "resources/list": self._resources_list,
        })

    @property
    def methods(self) -> tuple[str, ...]:
        return tuple(self._capabilities)

    def handle(self, method: str, request: Request) -> Response | None:
        if method.startswith(NOTIFICATION_PREFIX):
            self._notification(method, request)
            return None

        handler = self._capabilities.get(method)
        try:
            if handler is None:
                raise MethodNotFoundError(method)
            result = handler(request)
        except McpError as exc:
            self._log.warning("Error response: code=%d, message=%s", exc.code, exc.message)
            return Response.failure(request, exc.code, exc.message)
        except Exception as exc:
            self._log.exception("Unhandled error while serving %s", method)
            return Response.failure(request, INTERNAL_ERROR, f"Internal error: {exc}")
        return Response.success(request, result)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def _notification(self, method: str, request: Request) -> None:
        if method == "notifications/initialized":
            self._log.info("Client initialized notification received")
        elif method == "notifications/cancelled":
            params = request.params if isinstance(request.params, Mapping) else {}
            self._log.info("Client cancelled request %r: %s", params.get("requestId"), params.get("reason", ""))
        else:
            self._log.info("Unknown notification: %s", method)

    # ------------------------------------------------------------------
    # Capability handlers
    # ------------------------------------------------------------------

    def _initialize(self, request: Request) -> dict[str, Any]:
        self._log.info("Server initialized")
        return {
            "protocolVersion": self._settings.protocol_version,
            "serverInfo": {
                "name": self._settings.server_name,
                "version": self._settings.server_version,
            },
            "capabilities": {
                "tools": {"listChanged": False},
                "prompts": {"listChanged": False},
                "resources": {"listChanged": False},
            },
        }

    def _ping(self, request: Request) -> dict[str, Any]:
        return {}

    def _tools_list(self, request: Request) -> dict[str, Any]:
        self._log.info("Tools list requested")
        return {"tools": [tool.to_wire() for tool in self._executor.descriptors]}

    def _tools_call(self, request: Request) -> dict[str, Any]:
        params = request.params
        if not isinstance(params, Mapping):
            raise InvalidParamsError("Missing params for tools/call")
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidParamsError("Missing tool name")
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}

        self._log.info("Tool called: %s", name)
        try:
            text = self._executor.execute(name, arguments)
        except ToolArgumentError as exc:
            raise InvalidParamsError(str(exc)) from exc
        except Exception as exc:
            self._log.exception("Error executing tool %s", name)
            raise InternalError(f"Error executing tool: {exc}") from exc

        return {"content": [{"type": "text", "text": text}]}

    def _prompts_list(self, request: Request) -> dict[str, Any]:
        self._log.info("Prompts list requested")
        return {"prompts": []}

    def _resources_list(self, request: Request) -> dict[str, Any]:
        self._log.info("Resources list requested")
        return {"resources": []}
