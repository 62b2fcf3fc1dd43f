"""
Utility modules for the design system MCP server.
"""

from .component_naming import (
    build_import_statement,
    component_name_from_path,
    extract_exported_component_names,
    kebab_to_pascal,
    strip_component_extension,
)

__all__ = [
    "build_import_statement",
    "component_name_from_path",
    "extract_exported_component_names",
    "kebab_to_pascal",
    "strip_component_extension",
]
