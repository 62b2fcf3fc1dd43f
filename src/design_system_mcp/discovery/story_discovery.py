"""
Story file discovery.

This module locates Storybook story files under a design system root and
infers the companion component file for each story.
"""

import fnmatch
import logging
import os
import re
from pathlib import Path
from typing import List, Optional

from ..analysis.exceptions import DiscoveryError
from ..config.settings import COMPONENT_EXTENSIONS, EXCLUDED_DIRS, DesignSystemConfig

logger = logging.getLogger(__name__)

STORY_SUFFIX_PATTERN = re.compile(r"\.stories\.(js|jsx|ts|tsx|mdx)$")


def is_story_file(path: str) -> bool:
    return bool(STORY_SUFFIX_PATTERN.search(os.path.basename(path)))


def story_base_name(story_path: str) -> str:
    """File name of a story without its ``.stories.<ext>`` suffix."""
    return STORY_SUFFIX_PATTERN.sub("", os.path.basename(story_path))


def find_component_file(story_path: str) -> Optional[str]:
    """
    Find the component file that belongs to a story file.

    Tries ``<base>.{tsx,ts,jsx,js}`` next to the story, then
    ``<base>/index.{tsx,ts,jsx,js}``.

    Args:
        story_path: Path to the story file

    Returns:
        Path to the component file, or None if nothing matches
    """
    directory = Path(story_path).parent
    base = story_base_name(story_path)

    for ext in COMPONENT_EXTENSIONS:
        candidate = directory / f"{base}{ext}"
        if candidate.is_file():
            return str(candidate)

    for ext in COMPONENT_EXTENSIONS:
        candidate = directory / base / f"index{ext}"
        if candidate.is_file():
            return str(candidate)

    return None


def _is_excluded(path: Path, root: Path, exclude_patterns: List[str]) -> bool:
    relative = path.relative_to(root)
    if any(part in EXCLUDED_DIRS for part in relative.parts[:-1]):
        return True
    relative_str = relative.as_posix()
    return any(
        fnmatch.fnmatch(relative_str, pattern) or fnmatch.fnmatch(path.name, pattern)
        for pattern in exclude_patterns
    )


def find_story_files(config: DesignSystemConfig) -> List[str]:
    """
    Find story files matching the configured patterns.

    Args:
        config: Design system configuration

    Returns:
        Sorted, de-duplicated absolute paths

    Raises:
        DiscoveryError: If the root directory does not exist
    """
    root = Path(config.root_directory).resolve()
    if not root.is_dir():
        raise DiscoveryError(
            f"Root directory does not exist: {root}", root_directory=str(root)
        )

    found = set()
    for pattern in config.storybook.stories_patterns:
        for path in root.glob(pattern):
            if not path.is_file():
                continue
            if _is_excluded(path, root, config.storybook.exclude_patterns):
                continue
            found.add(str(path))

    story_files = sorted(found)
    logger.info(f"Found {len(story_files)} story file(s) under {root}")
    return story_files
