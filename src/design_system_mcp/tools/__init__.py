"""
MCP tools for the design system server.
"""

from .component_tools import (
    analyze_component,
    get_design_system_info,
    list_components,
    refresh_components,
    search_components,
)

__all__ = [
    "analyze_component",
    "get_design_system_info",
    "list_components",
    "refresh_components",
    "search_components",
]
