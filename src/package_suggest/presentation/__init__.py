"""
Presentation layer.

- mcp_server: Model Context Protocol server and tools
"""
