"""
Story file discovery for design system roots.
"""

from .story_discovery import (
    find_component_file,
    find_story_files,
    is_story_file,
    story_base_name,
)

__all__ = [
    "find_component_file",
    "find_story_files",
    "is_story_file",
    "story_base_name",
]
