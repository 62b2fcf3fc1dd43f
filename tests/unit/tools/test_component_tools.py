"""
Tests for the component catalogue MCP tools.
"""

import json

import pytest
from unittest.mock import AsyncMock, Mock

from design_system_mcp.analysis.exceptions import AnalyzerExecutionFailure, ChainAborted
from design_system_mcp.analysis.models import (
    AnalysisRecord,
    Diagnostic,
    DiagnosticLevel,
    MergedEntity,
)
from design_system_mcp.config.settings import get_default_config
from design_system_mcp.services.extraction_service import ExtractionReport, FileExtraction
from design_system_mcp.tools.component_tools import (
    analyze_component,
    get_design_system_info,
    list_components,
    refresh_components,
    search_components,
)


def entity(name, **kwargs):
    return MergedEntity(record=AnalysisRecord(name=name, **kwargs), contributors=["storybook"])


@pytest.fixture
def report():
    return ExtractionReport(
        entities=[
            entity(
                "Button",
                description="Triggers an action",
                category="actions",
                tags=["interactive"],
                import_path="import { Button } from './Button';",
            ),
            entity("Card", description="Groups content", category="layout", tags=["surface"]),
            entity("IconButton", description="Compact button", category="actions"),
        ],
        diagnostics=[Diagnostic(level=DiagnosticLevel.WARNING, message="odd", source="source")],
        files=[FileExtraction(story_file="a.stories.tsx"), FileExtraction(story_file="b.stories.tsx")],
        processing_time=0.1234,
    )


@pytest.fixture
def mock_context(report):
    """Create a mock MCP context with a design system lifespan context."""
    context = Mock()
    context.request_context = Mock()
    context.request_context.lifespan_context = Mock()
    context.request_context.lifespan_context.config = get_default_config()
    context.request_context.lifespan_context.get_report = AsyncMock(return_value=report)
    context.request_context.lifespan_context.refresh = AsyncMock(return_value=report)
    return context


class TestAnalyzeComponent:
    """Test cases for analyze_component."""

    @pytest.mark.asyncio
    async def test_found_case_insensitive(self, mock_context):
        result = json.loads(await analyze_component(mock_context, "  button "))

        assert result["success"] is True
        assert result["component"]["name"] == "Button"
        assert result["component"]["importStatement"] == "import { Button } from './Button';"

    @pytest.mark.asyncio
    async def test_not_found(self, mock_context):
        result = json.loads(await analyze_component(mock_context, "Modal"))

        assert result["success"] is False
        assert result["error"] == "Component 'Modal' not found"
        assert result["available_components"] == ["Button", "Card", "IconButton"]

    @pytest.mark.asyncio
    async def test_chain_aborted(self, mock_context):
        failure = AnalyzerExecutionFailure("boom", analyzer="source", cause=RuntimeError("boom"))
        mock_context.request_context.lifespan_context.get_report.side_effect = ChainAborted(
            "Analyzer source failed", analyzer="source", failure=failure
        )

        result = json.loads(await analyze_component(mock_context, "Button"))

        assert result["success"] is False
        assert result["analyzer"] == "source"
        assert result["details"]["category"] == "chain_aborted"


class TestListComponents:
    """Test cases for list_components."""

    @pytest.mark.asyncio
    async def test_all(self, mock_context):
        result = json.loads(await list_components(mock_context))

        assert result["total_components"] == 3
        assert result["categories"] == ["actions", "layout"]

    @pytest.mark.asyncio
    async def test_category_filter(self, mock_context):
        result = json.loads(await list_components(mock_context, category="Actions"))

        assert [c["name"] for c in result["components"]] == ["Button", "IconButton"]
        assert result["categories"] == ["actions", "layout"]


class TestSearchComponents:
    """Test cases for search_components."""

    @pytest.mark.asyncio
    async def test_search_all_fields(self, mock_context):
        result = json.loads(await search_components(mock_context, "button"))

        assert [r["name"] for r in result["results"]] == ["Button", "IconButton"]
        assert result["results"][1]["matched_fields"] == ["name", "description"]

    @pytest.mark.asyncio
    async def test_search_tags_only(self, mock_context):
        result = json.loads(await search_components(mock_context, "surface", ["tags"]))

        assert result["total_results"] == 1
        assert result["results"][0]["matched_fields"] == ["tags"]

    @pytest.mark.asyncio
    async def test_unknown_field(self, mock_context):
        result = json.loads(await search_components(mock_context, "x", ["props"]))

        assert result["success"] is False
        assert "Unknown search field" in result["error"]

    @pytest.mark.asyncio
    async def test_empty_query(self, mock_context):
        result = json.loads(await search_components(mock_context, "   "))

        assert result["success"] is False
        mock_context.request_context.lifespan_context.get_report.assert_not_called()


class TestDesignSystemTools:
    """Test cases for info and refresh tools."""

    @pytest.mark.asyncio
    async def test_get_design_system_info(self, mock_context):
        result = json.loads(await get_design_system_info(mock_context))

        assert result["name"] == "My Design System"
        assert result["framework"] == "react"
        assert result["merge_strategy"] == "merge"
        assert result["analyzers"] == ["comments", "storybook", "source"]
        assert result["total_components"] == 3
        assert result["component_index"]["byCategory"]["layout"] == ["Card"]

    @pytest.mark.asyncio
    async def test_refresh_components(self, mock_context):
        result = json.loads(await refresh_components(mock_context))

        mock_context.request_context.lifespan_context.refresh.assert_awaited_once()
        assert result["success"] is True
        assert result["total_components"] == 3
        assert result["files_processed"] == 2
        assert result["processing_time"] == 0.123
        assert result["diagnostics"][0]["level"] == "warning"
