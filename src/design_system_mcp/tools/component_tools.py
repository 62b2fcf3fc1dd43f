"""
Component catalogue tools for the MCP server.

These tools expose the merged design system components to MCP clients:
lookup by name, listing by category, free-text search, catalogue metadata
and re-extraction.
"""

import json
import logging
from typing import List, Optional

from mcp.server.fastmcp import Context

from ..analysis.exceptions import ChainAborted, format_error_details
from ..output.generator import build_component_index, to_component_context

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("name", "description", "tags")


def _error_response(e: Exception) -> str:
    payload = {"success": False, "error": str(e)}
    if isinstance(e, ChainAborted):
        payload["analyzer"] = e.analyzer
        payload["details"] = format_error_details(e)
    return json.dumps(payload, indent=2)


async def analyze_component(ctx: Context, component_name: str) -> str:
    """
    Get the full context of one design system component.

    Returns the merged description, import statement, props schema, slots,
    code examples, related components and accessibility guidelines of the
    component. Names are matched case-insensitively.

    Args:
        ctx: The MCP server provided context
        component_name: Name of the component (e.g. 'Button')

    Returns:
        JSON string with the component context
    """
    try:
        report = await ctx.request_context.lifespan_context.get_report()
        key = component_name.strip().lower()
        entity = next((e for e in report.entities if e.key == key), None)
        if entity is None:
            return json.dumps(
                {
                    "success": False,
                    "error": f"Component '{component_name}' not found",
                    "available_components": sorted(e.name for e in report.entities),
                },
                indent=2,
            )

        return json.dumps(
            {"success": True, "component": to_component_context(entity)}, indent=2
        )
    except Exception as e:
        logger.error(f"analyze_component failed: {e}")
        return _error_response(e)


async def list_components(ctx: Context, category: Optional[str] = None) -> str:
    """
    List the components of the design system.

    Args:
        ctx: The MCP server provided context
        category: Optional category filter (case-insensitive)

    Returns:
        JSON string with component summaries and the available categories
    """
    try:
        report = await ctx.request_context.lifespan_context.get_report()
        contexts = [to_component_context(e) for e in report.entities]
        categories = sorted({c["category"] for c in contexts})

        if category:
            contexts = [c for c in contexts if c["category"].lower() == category.lower()]

        components = [
            {
                "name": c["name"],
                "description": c["description"],
                "category": c["category"],
                "tags": c["tags"],
                "importStatement": c["importStatement"],
            }
            for c in contexts
        ]
        return json.dumps(
            {
                "success": True,
                "category": category,
                "components": components,
                "total_components": len(components),
                "categories": categories,
            },
            indent=2,
        )
    except Exception as e:
        logger.error(f"list_components failed: {e}")
        return _error_response(e)


async def search_components(
    ctx: Context, query: str, search_in: Optional[List[str]] = None
) -> str:
    """
    Search components by name, description or tags.

    Args:
        ctx: The MCP server provided context
        query: Case-insensitive search text
        search_in: Fields to search (default: name, description, tags)

    Returns:
        JSON string with matching components and the fields that matched
    """
    try:
        fields = list(search_in or SEARCH_FIELDS)
        unknown = [f for f in fields if f not in SEARCH_FIELDS]
        if unknown:
            raise ValueError(
                f"Unknown search field(s): {', '.join(unknown)}. "
                f"Valid fields: {', '.join(SEARCH_FIELDS)}"
            )

        needle = query.strip().lower()
        if not needle:
            raise ValueError("Search query must not be empty")

        report = await ctx.request_context.lifespan_context.get_report()
        matches = []
        for entity in report.entities:
            record = entity.record
            matched = []
            if "name" in fields and needle in record.name.lower():
                matched.append("name")
            if "description" in fields and needle in record.description.lower():
                matched.append("description")
            if "tags" in fields and any(needle in tag.lower() for tag in record.tags):
                matched.append("tags")
            if matched:
                matches.append(
                    {
                        "name": record.name,
                        "description": record.description,
                        "category": record.category,
                        "tags": list(record.tags),
                        "matched_fields": matched,
                    }
                )

        return json.dumps(
            {
                "success": True,
                "query": query,
                "search_in": fields,
                "results": matches,
                "total_results": len(matches),
            },
            indent=2,
        )
    except Exception as e:
        logger.error(f"search_components failed: {e}")
        return _error_response(e)


async def get_design_system_info(ctx: Context) -> str:
    """
    Get metadata about the design system and its component index.

    Args:
        ctx: The MCP server provided context

    Returns:
        JSON string with design system settings, theme and index
    """
    try:
        context = ctx.request_context.lifespan_context
        config = context.config
        report = await context.get_report()
        components = [to_component_context(e) for e in report.entities]

        return json.dumps(
            {
                "success": True,
                "name": config.name,
                "version": config.version,
                "description": config.description,
                "framework": config.storybook.framework.value,
                "design_library": config.design_library.value,
                "root_directory": config.root_directory,
                "merge_strategy": config.chain.merge_strategy.value,
                "analyzers": [s.name for s in config.chain.stages if s.enabled],
                "theme": config.theme or None,
                "total_components": len(components),
                "component_index": build_component_index(components),
            },
            indent=2,
        )
    except Exception as e:
        logger.error(f"get_design_system_info failed: {e}")
        return _error_response(e)


async def refresh_components(ctx: Context) -> str:
    """
    Re-extract every component from the design system sources.

    Use this after story or component files changed.

    Args:
        ctx: The MCP server provided context

    Returns:
        JSON string with extraction statistics and diagnostics
    """
    try:
        report = await ctx.request_context.lifespan_context.refresh()
        return json.dumps(
            {
                "success": True,
                "total_components": len(report.entities),
                "files_processed": report.files_processed,
                "files_failed": report.files_failed,
                "processing_time": round(report.processing_time, 3),
                "diagnostics": [d.to_dict() for d in report.diagnostics],
            },
            indent=2,
        )
    except Exception as e:
        logger.error(f"refresh_components failed: {e}")
        return _error_response(e)
