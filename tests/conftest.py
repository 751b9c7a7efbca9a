"""Shared test fixtures for calc-mcp."""

from __future__ import annotations

import io
import json
import logging

import pytest

from calc_mcp.config import ServerSettings
from calc_mcp.protocol import Dispatcher
from calc_mcp.tools import ArithmeticToolExecutor
from calc_mcp.transport import run


@pytest.fixture(autouse=True)
def set_test_env(monkeypatch):
    """Pin settings so a developer's .env or shell cannot leak into tests."""
    monkeypatch.setenv("CALC_MCP_SERVER_NAME", "calc-mcp-test")
    monkeypatch.setenv("CALC_MCP_SERVER_VERSION", "0.0.0")
    monkeypatch.setenv("CALC_MCP_PROTOCOL_VERSION", "2025-06-18")
    monkeypatch.setenv("CALC_MCP_LOG_LEVEL", "DEBUG")


@pytest.fixture
def settings() -> ServerSettings:
    return ServerSettings(server_name="calc-mcp-test", server_version="0.0.0")


@pytest.fixture
def diagnostics() -> logging.Logger:
    return logging.getLogger("calc_mcp.tests")


@pytest.fixture
def dispatcher(settings, diagnostics) -> Dispatcher:
    return Dispatcher(ArithmeticToolExecutor(), settings, diagnostics=diagnostics)


@pytest.fixture
def serve_lines(dispatcher, diagnostics):
    """Run the transport loop over the given input lines.

    Returns ``(exit_code, raw_output_lines)``.
    """

    def _serve(*lines: str) -> tuple[int, list[str]]:
        stdin = io.StringIO("".join(line + "\n" for line in lines))
        stdout = io.StringIO()
        code = run(stdin, stdout, dispatcher.handle, diagnostics=diagnostics)
        return code, stdout.getvalue().splitlines()

    return _serve


@pytest.fixture
def serve_json(serve_lines):
    """Like ``serve_lines`` but takes dict messages and returns decoded replies."""

    def _serve(*messages: dict) -> list[dict]:
        _, out = serve_lines(*(json.dumps(m) for m in messages))
        return [json.loads(line) for line in out]

    return _serve
