"""
Core application setup for the design system MCP server.
"""

from .app import create_app, register_tools, run_server
from .context import DesignSystemContext

__all__ = ["create_app", "register_tools", "run_server", "DesignSystemContext"]
