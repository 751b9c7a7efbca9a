"""Calculator MCP server: newline-delimited JSON-RPC over stdio."""

__version__ = "1.0.0"
