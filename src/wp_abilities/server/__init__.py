"""MCP server surface.

Public API: create_mcp_server
"""

from wp_abilities.server.mcp_server import create_mcp_server

__all__ = ["create_mcp_server"]
