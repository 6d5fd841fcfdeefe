"""MCP server exposing session operations as tools."""

from rlmdoc.server.mcp_server import create_mcp_server

__all__ = ["create_mcp_server"]
