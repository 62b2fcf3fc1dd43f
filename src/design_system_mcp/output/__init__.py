"""
MCP context output generation.
"""

from .generator import (
    generate_inline_context,
    generate_mcp_output,
    inline_context_path,
    is_up_to_date,
    load_inline_context_file,
    to_component_context,
    write_inline_context_file,
    write_inline_context_files,
    write_mcp_output,
)

__all__ = [
    "generate_inline_context",
    "generate_mcp_output",
    "inline_context_path",
    "is_up_to_date",
    "load_inline_context_file",
    "to_component_context",
    "write_inline_context_file",
    "write_inline_context_files",
    "write_mcp_output",
]
