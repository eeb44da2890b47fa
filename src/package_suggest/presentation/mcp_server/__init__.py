"""
Umbraco Package Suggest MCP Server

Exposes project analysis and package recommendation as MCP tools.
"""

from .server import create_server, main

__all__ = ["create_server", "main"]
