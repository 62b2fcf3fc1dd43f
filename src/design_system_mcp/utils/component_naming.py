"""
Component naming and import statement helpers.
"""

import os
import re
from typing import List, Optional

COMPONENT_EXTENSION_PATTERN = re.compile(r"\.(tsx?|jsx?|vue|svelte)$")

NAMED_EXPORT_PATTERN = re.compile(
    r"export\s+(?:const|function|class)\s+([A-Z][a-zA-Z0-9]*)"
)
DEFAULT_EXPORT_PATTERN = re.compile(
    r"export\s+default\s+(?:function\s+|class\s+)?([A-Z][a-zA-Z0-9]*)"
)


def kebab_to_pascal(name: str) -> str:
    """Convert ``my-awesome-button`` to ``MyAwesomeButton``."""
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[-_]", name) if part)


def strip_component_extension(file_name: str) -> str:
    return COMPONENT_EXTENSION_PATTERN.sub("", os.path.basename(file_name))


def component_name_from_path(file_path: str) -> str:
    """Capitalized file name without extension, ``Unknown`` when empty."""
    base = strip_component_extension(file_path)
    if base == "index":
        base = os.path.basename(os.path.dirname(file_path))
    if not base:
        return "Unknown"
    return base[:1].upper() + base[1:]


def extract_exported_component_names(content: str) -> List[str]:
    """
    Find exported names that look like components (start uppercase).

    Args:
        content: Component source text

    Returns:
        Unique names in order of appearance, default export last
    """
    names: List[str] = []
    for match in NAMED_EXPORT_PATTERN.finditer(content):
        if match.group(1) not in names:
            names.append(match.group(1))

    default_match = DEFAULT_EXPORT_PATTERN.search(content)
    if default_match and default_match.group(1) not in names:
        names.append(default_match.group(1))

    return names


def build_import_statement(
    component_name: str,
    component_file: Optional[str],
    base_import_path: Optional[str] = None,
) -> str:
    """
    Build the import statement for a component.

    Uses ``<base_import_path>/<file>`` when a base path is configured and a
    relative path otherwise.
    """
    module = strip_component_extension(component_file) if component_file else None

    if base_import_path:
        target = f"{base_import_path.rstrip('/')}/{module or component_name}"
    elif module:
        target = f"./{module}"
    else:
        target = f"./components/{component_name}"

    return f"import {{ {component_name} }} from '{target}';"
