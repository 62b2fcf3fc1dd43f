"""
Tests for the @dsm annotation analyzer.
"""

import pytest

from design_system_mcp.analysis.exceptions import AnalyzerExecutionFailure
from design_system_mcp.analysis.models import DiagnosticLevel, PipelineContext
from design_system_mcp.analyzers.comment_analyzer import CommentAnalyzer, find_dsm_blocks


class TestFindDsmBlocks:
    """Test cases for annotation block discovery."""

    def test_block_comment(self):
        content = "/**\n * @dsm\n * @name: Button\n */\nexport const Button = 1;"

        blocks = find_dsm_blocks(content)

        assert len(blocks) == 1
        assert blocks[0].text == "@name: Button"
        assert blocks[0].line == 1

    def test_json_after_prose(self):
        content = '/**\n * Button docs\n * @dsm {"name": "Button"}\n */'

        blocks = find_dsm_blocks(content)

        assert blocks[0].text == '{"name": "Button"}'

    def test_line_comment_group(self):
        content = (
            "import x from 'y';\n"
            "// @dsm\n"
            "// name: Icon\n"
            "// tags: media\n"
            "\n"
            "// unrelated comment\n"
        )

        blocks = find_dsm_blocks(content)

        assert len(blocks) == 1
        assert blocks[0].text == "name: Icon\ntags: media"
        assert blocks[0].line == 2

    def test_comments_without_marker_are_ignored(self):
        assert find_dsm_blocks("/** Plain JSDoc */\n// note\n") == []


class TestCommentAnalyzer:
    """Test cases for CommentAnalyzer."""

    @pytest.fixture
    def analyzer(self):
        return CommentAnalyzer()

    def test_structured_block(self, analyzer, card_component):
        result = analyzer.run(PipelineContext(component_file_path=card_component))

        assert result.analyzer == "comments"
        record = result.records[0]
        assert record.name == "Card"
        assert record.description == "Surface that groups related content and actions"
        assert record.category == "layout"
        assert record.tags == ["surface", "container"]
        assert [(p.name, p.type, p.required) for p in record.props] == [
            ("title", "string", True),
            ("elevation", "number", False),
        ]
        assert record.examples[0].title == "Basic"
        assert record.examples[0].code == '<Card title="Hello" />'
        assert record.custom_data["comments"]["source"] == "structured-comments"
        assert result.metadata["commentBlocks"] == 1

    def test_json_block(self, analyzer, tmp_path):
        component = tmp_path / "Tooltip.tsx"
        component.write_text(
            '/* @dsm {"name": "Tooltip", "tags": ["overlay"], '
            '"relatedComponents": ["Popover"]} */\n'
            "export const Tooltip = () => null;\n"
        )

        record = analyzer.run(PipelineContext(component_file_path=str(component))).records[0]

        assert record.name == "Tooltip"
        assert record.tags == ["overlay"]
        assert record.related_components == ["Popover"]
        assert record.custom_data["comments"]["source"] == "json-block"

    def test_malformed_block_adds_warning(self, analyzer, tmp_path):
        component = tmp_path / "Broken.tsx"
        component.write_text(
            "export const A = 1;\n/* @dsm {\"name\": */\nexport const Broken = () => null;\n"
        )

        result = analyzer.run(PipelineContext(component_file_path=str(component)))

        assert result.records == []
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].level == DiagnosticLevel.WARNING
        assert result.diagnostics[0].line == 2

    def test_malformed_block_strict_parsing_raises(self, analyzer, tmp_path):
        component = tmp_path / "Broken.tsx"
        component.write_text("/* @dsm just words */\nexport const Broken = () => null;\n")

        with pytest.raises(AnalyzerExecutionFailure):
            analyzer.run(
                PipelineContext(
                    component_file_path=str(component), config={"strictParsing": True}
                )
            )

    def test_jsdoc_fallback(self, analyzer, button_component):
        result = analyzer.run(PipelineContext(component_file_path=button_component))

        record = result.records[0]
        assert record.name == "Button"
        assert record.description == "Primary UI component for user interaction"
        assert record.custom_data["comments"]["source"] == "jsdoc"

    def test_jsdoc_fallback_disabled(self, analyzer, button_component):
        result = analyzer.run(
            PipelineContext(component_file_path=button_component, config={"includeJSDoc": False})
        )

        assert result.records == []

    def test_infers_component_from_story(self, analyzer, button_story):
        result = analyzer.run(PipelineContext(story_file_path=button_story))

        assert result.metadata["componentFile"].endswith("Button.tsx")

    def test_no_component_file(self, analyzer, tmp_path):
        story = tmp_path / "Lonely.stories.tsx"
        story.write_text("export default {};")

        result = analyzer.run(PipelineContext(story_file_path=str(story)))

        assert result.records == []
        assert result.metadata["warning"] == "No component file found to parse comments from"
