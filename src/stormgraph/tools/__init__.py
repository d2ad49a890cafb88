"""
Tool layer for stormgraph.

Exposes engine operations as MCP tools, and a thin HTTP client for the
backend service.
"""

from stormgraph.tools.server import (
    create_server,
    render,
    run_server,
)

__all__ = [
    "create_server",
    "render",
    "run_server",
]
