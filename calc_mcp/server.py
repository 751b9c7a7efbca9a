"""Process entry point for the calculator MCP server.

Usage:
    python -m calc_mcp                    # serve MCP on stdin/stdout
    python -m calc_mcp --log-level DEBUG  # verbose diagnostics on stderr
    calc-mcp --version
"""

from __future__ import annotations

import argparse
import io
import logging
import sys

from dotenv import load_dotenv

from calc_mcp import __version__
from calc_mcp.config import ServerSettings, get_settings
from calc_mcp.protocol import Dispatcher
from calc_mcp.tools import ArithmeticToolExecutor
from calc_mcp.transport import run

logger = logging.getLogger("calc_mcp")

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def configure_logging(level: str) -> None:
    """Send all diagnostics to stderr; stdout is reserved for the protocol."""
    logging.basicConfig(
        level=level.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def build_dispatcher(settings: ServerSettings | None = None) -> Dispatcher:
    return Dispatcher(ArithmeticToolExecutor(), settings or get_settings(), diagnostics=logger)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="calc-mcp",
        description="Arithmetic MCP server speaking JSON-RPC over stdio",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Diagnostic log level (default: CALC_MCP_LOG_LEVEL or INFO)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    load_dotenv()
    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)

    # Undecodable bytes must not kill the read loop
    if isinstance(sys.stdin, io.TextIOWrapper):
        sys.stdin.reconfigure(encoding="utf-8", errors="replace")

    dispatcher = build_dispatcher(settings)
    try:
        return run(sys.stdin, sys.stdout, dispatcher.handle, diagnostics=logger)
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
