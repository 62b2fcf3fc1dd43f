"""
Context output generation.

Turns merged entities into MCP component context documents, either one
consolidated JSON file or inline ``<story>.dsm.json`` files written next to
each story file, and reads inline files back for consolidation.
"""

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..analysis.models import (
    AccessibilityDescriptor,
    AnalysisRecord,
    ExampleDescriptor,
    MergedEntity,
    PropDescriptor,
    SlotDescriptor,
    utc_timestamp,
)
from ..config.settings import DesignSystemConfig
from ..discovery.story_discovery import story_base_name

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "general"


def component_id(name: str) -> str:
    return re.sub(r"\s+", "-", name.strip().lower())


def to_component_context(entity: MergedEntity) -> Dict[str, Any]:
    """
    Build the MCP context for one merged component.

    Args:
        entity: Merged entity

    Returns:
        Component context dictionary
    """
    record = entity.record
    basic = record.examples[0].code if record.examples else f"<{record.name} />"
    advanced = record.examples[1].code if len(record.examples) > 1 else None
    with_slots = None
    if record.slots:
        with_slots = next(
            (e.code for e in record.examples if "slot" in e.title.lower()), None
        )

    return {
        "id": component_id(record.name),
        "name": record.name,
        "description": record.description,
        "category": record.category or DEFAULT_CATEGORY,
        "tags": list(record.tags),
        "importStatement": record.import_path or "",
        "basicUsage": basic,
        "propsSchema": [p.to_dict() for p in record.props],
        "slots": [s.to_dict() for s in record.slots],
        "codeExamples": {
            "basic": basic,
            "advanced": advanced,
            "withSlots": with_slots,
            "all": [e.to_dict() for e in record.examples],
        },
        "relatedComponents": list(record.related_components),
        "dependencies": list(record.dependencies),
        "accessibilityGuidelines": [a.to_dict() for a in record.accessibility_notes],
        "contributors": list(entity.contributors),
    }


def record_from_component_context(context: Dict[str, Any]) -> AnalysisRecord:
    """Rebuild an AnalysisRecord from a component context dictionary."""
    examples = context.get("codeExamples") or {}
    example_list = [
        ExampleDescriptor.from_dict(e) for e in examples.get("all") or [] if isinstance(e, dict)
    ]
    if not example_list and examples.get("basic"):
        example_list.append(ExampleDescriptor(title="Basic", code=examples["basic"]))
        if examples.get("advanced"):
            example_list.append(ExampleDescriptor(title="Advanced", code=examples["advanced"]))

    return AnalysisRecord(
        name=str(context.get("name") or ""),
        description=str(context.get("description") or ""),
        category=context.get("category"),
        tags=list(context.get("tags") or []),
        import_path=context.get("importStatement") or None,
        props=[PropDescriptor.from_dict(p) for p in context.get("propsSchema") or []],
        slots=[SlotDescriptor.from_dict(s) for s in context.get("slots") or []],
        examples=example_list,
        dependencies=list(context.get("dependencies") or []),
        related_components=list(context.get("relatedComponents") or []),
        accessibility_notes=[
            AccessibilityDescriptor.from_dict(a)
            for a in context.get("accessibilityGuidelines") or []
            if isinstance(a, dict)
        ],
    )


def build_component_index(components: List[Dict[str, Any]]) -> Dict[str, Any]:
    by_tag: Dict[str, List[str]] = {}
    by_category: Dict[str, List[str]] = {}
    for component in components:
        for tag in component["tags"]:
            by_tag.setdefault(tag, []).append(component["name"])
        by_category.setdefault(component["category"], []).append(component["name"])

    return {
        "byTag": by_tag,
        "byCategory": by_category,
        "alphabetical": sorted(c["name"] for c in components),
    }


def generate_mcp_output(
    entities: List[MergedEntity], config: DesignSystemConfig
) -> Dict[str, Any]:
    """
    Generate the consolidated MCP document.

    Args:
        entities: Merged entities
        config: Design system configuration

    Returns:
        Document with metadata, designSystem, components and componentIndex
    """
    components = [to_component_context(entity) for entity in entities]
    return {
        "metadata": {
            "name": config.name,
            "version": config.version,
            "description": config.description,
            "framework": config.storybook.framework.value,
            "designLibrary": config.design_library.value,
            "generatedAt": utc_timestamp(),
            "sourceDirectory": config.root_directory,
        },
        "designSystem": {"theme": config.theme or None},
        "components": components,
        "componentIndex": build_component_index(components),
    }


def generate_inline_context(
    story_file: str, entities: List[MergedEntity], config: DesignSystemConfig
) -> Dict[str, Any]:
    return {
        "metadata": {
            "storyFile": story_file,
            "generatedAt": utc_timestamp(),
            "framework": config.storybook.framework.value,
            "designLibrary": config.design_library.value,
        },
        "components": [to_component_context(entity) for entity in entities],
    }


def inline_context_path(story_file: str, config: DesignSystemConfig) -> str:
    """Path of the inline context file that belongs to a story file."""
    base = story_base_name(story_file)
    prefix = config.output.inline_file_prefix
    file_name = f"{prefix}-{base}" if prefix else base
    return os.path.join(
        os.path.dirname(story_file), f"{file_name}{config.output.inline_file_extension}"
    )


def is_up_to_date(story_file: str, config: DesignSystemConfig) -> bool:
    """True if the story's inline context file is newer than the story."""
    context_file = inline_context_path(story_file, config)
    try:
        return os.path.getmtime(context_file) > os.path.getmtime(story_file)
    except OSError:
        return False


def _write_json(path: str, data: Dict[str, Any]) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.write("\n")


def write_mcp_output(output: Dict[str, Any], output_path: str) -> str:
    _write_json(output_path, output)
    logger.info(f"Wrote {len(output.get('components', []))} component(s) to {output_path}")
    return output_path


def write_inline_context_file(
    story_file: str, entities: List[MergedEntity], config: DesignSystemConfig
) -> str:
    path = inline_context_path(story_file, config)
    _write_json(path, generate_inline_context(story_file, entities, config))
    logger.debug(f"Wrote inline context {path}")
    return path


def write_inline_context_files(
    story_entities: Iterable[Tuple[str, List[MergedEntity]]],
    config: DesignSystemConfig,
) -> int:
    """
    Write one inline context file per story that produced components.

    Args:
        story_entities: (story file, entities) pairs
        config: Design system configuration

    Returns:
        Number of files written
    """
    written = 0
    for story_file, entities in story_entities:
        if not entities:
            continue
        write_inline_context_file(story_file, entities, config)
        written += 1
    return written


def load_inline_context_file(path: str) -> List[AnalysisRecord]:
    """
    Read an inline context file back into records.

    Args:
        path: Inline context file path

    Returns:
        Records for every component in the file

    Raises:
        ValueError: If the file does not hold a context document
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict) or not isinstance(data.get("components"), list):
        raise ValueError(f"Not an inline context file: {path}")
    return [record_from_component_context(c) for c in data["components"]]


def find_inline_context_file(story_file: str, config: DesignSystemConfig) -> Optional[str]:
    path = inline_context_path(story_file, config)
    return path if os.path.isfile(path) else None
