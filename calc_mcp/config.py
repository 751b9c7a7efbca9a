"""Environment-driven server settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings

from calc_mcp import __version__

# Protocol revision announced in the initialize handshake
DEFAULT_PROTOCOL_VERSION = "2025-06-18"


class ServerSettings(BaseSettings):
    """Identity and logging settings for the stdio server.

    Read from ``CALC_MCP_*`` environment variables and an optional ``.env``.
    """

    server_name: str = "calc-mcp"
    server_version: str = __version__
    protocol_version: str = DEFAULT_PROTOCOL_VERSION
    log_level: str = "INFO"

    model_config = {"env_prefix": "CALC_MCP_", "env_file": ".env", "extra": "ignore"}


@lru_cache(maxsize=1)
def get_settings() -> ServerSettings:
    return ServerSettings()
