"""
design-system-mcp: extract design system components from Storybook stories
and component sources, merge them, and serve them to AI assistants over MCP.
"""

__version__ = "0.1.0"
