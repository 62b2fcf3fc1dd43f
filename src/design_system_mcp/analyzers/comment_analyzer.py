"""
Annotation comment analyzer.

Reads ``@dsm`` annotations written by hand in component source files. A
block is either a JSON object::

    /**
     * @dsm {"name": "Button", "category": "actions"}
     */

or structured ``key: value`` lines::

    /**
     * @dsm
     * @name: Button
     * @tags: interactive, form
     * @props:
     * - label (string): Button text
     * - size (string?): Size token
     * @examples:
     * - Primary: <Button primary label="Go" />
     */

Consecutive ``// @dsm`` line comments form a block as well. When a file has
no annotations, the JSDoc above the exported component is used instead.
"""

import json
import os
import re
from typing import Any, Dict, List, Optional

from ..analysis.exceptions import AnalyzerExecutionFailure
from ..analysis.interfaces import BaseAnalyzer
from ..analysis.models import (
    AccessibilityDescriptor,
    AccessibilityKind,
    AnalysisRecord,
    AnalyzerResult,
    Diagnostic,
    DiagnosticLevel,
    ExampleDescriptor,
    PipelineContext,
    PropDescriptor,
)
from ..discovery.story_discovery import find_component_file
from ..utils.component_naming import component_name_from_path

BLOCK_COMMENT_PATTERN = re.compile(r"/\*(.*?)\*/", re.DOTALL)
LINE_COMMENT_PATTERN = re.compile(r"^[ \t]*//[ \t]?(.*)$", re.MULTILINE)
STRUCTURED_KEY_PATTERN = re.compile(r"^@?([A-Za-z]+)\s*:\s*(.*)$")
PROP_ENTRY_PATTERN = re.compile(r"^-\s*(\w+)\s*\(([^)]+)\)\s*:?\s*(.*)$")
EXAMPLE_ENTRY_PATTERN = re.compile(r"^-\s*([^:]+):\s*(.*)$")

LIST_SECTIONS = {"props", "examples"}


class DsmBlock:
    """An ``@dsm`` annotation and the line it starts on."""

    def __init__(self, text: str, line: int):
        self.text = text
        self.line = line


class CommentAnalyzer(BaseAnalyzer):
    """Extract ``@dsm`` annotations and JSDoc from component source files."""

    def __init__(self):
        super().__init__(
            name="comments",
            description="Extracts @dsm comments and manual annotations from "
            "component source files",
        )

    def get_config_schema(self):
        return {
            "includeJSDoc": {
                "type": "boolean",
                "description": "Include JSDoc comments as manual entries",
                "default": True,
            },
            "strictParsing": {
                "type": "boolean",
                "description": "Fail on malformed @dsm blocks instead of skipping",
                "default": False,
            },
            "inferComponentPath": {
                "type": "boolean",
                "description": "Try to infer component file path from story file",
                "default": True,
            },
        }

    def can_handle(self, context: PipelineContext) -> bool:
        return bool(context.component_file_path or context.story_file_path)

    def _run_impl(self, context: PipelineContext) -> AnalyzerResult:
        component_file = context.component_file_path
        if not component_file and self.option(context, "inferComponentPath"):
            component_file = find_component_file(context.story_file_path)

        if not component_file or not os.path.isfile(component_file):
            return self.create_result(
                [], warning="No component file found to parse comments from"
            )

        content = self.read_file_content(component_file)
        diagnostics: List[Diagnostic] = []
        records: List[AnalysisRecord] = []

        blocks = find_dsm_blocks(content)
        for block in blocks:
            try:
                records.append(self.parse_block(block.text, component_file))
            except ValueError as e:
                message = f"Malformed @dsm block in {component_file}: {e}"
                if self.option(context, "strictParsing"):
                    raise AnalyzerExecutionFailure(message, analyzer=self.name, cause=e) from e
                self.logger.warning(message)
                diagnostics.append(
                    Diagnostic(
                        level=DiagnosticLevel.WARNING,
                        message=message,
                        source=component_file,
                        line=block.line,
                    )
                )

        if not records and self.option(context, "includeJSDoc"):
            jsdoc_record = self.extract_jsdoc_record(content, component_file)
            if jsdoc_record:
                records.append(jsdoc_record)

        return self.create_result(
            records,
            diagnostics,
            componentFile=component_file,
            commentBlocks=len(blocks),
        )

    def parse_block(self, text: str, file_path: str) -> AnalysisRecord:
        """
        Parse one annotation block.

        Args:
            text: Block text with comment decoration removed
            file_path: Component file the block came from

        Returns:
            AnalysisRecord for the annotated component

        Raises:
            ValueError: If the block is neither valid JSON nor structured lines
        """
        if text.lstrip().startswith("{"):
            try:
                data = json.loads(text)
            except json.JSONDecodeError as e:
                raise ValueError(f"invalid JSON: {e}") from e
            if not isinstance(data, dict):
                raise ValueError("JSON annotation must be an object")
            return self._record_from_json(data, file_path)
        return self._record_from_lines(text, file_path)

    def _record_from_json(self, data: Dict[str, Any], file_path: str) -> AnalysisRecord:
        record = AnalysisRecord.from_dict(data)
        if not record.name:
            record.name = component_name_from_path(file_path)
        record.custom_data = {
            "comments": {
                "source": "json-block",
                "filePath": file_path,
                "manual": True,
                "originalData": data,
            }
        }
        return record

    def _record_from_lines(self, text: str, file_path: str) -> AnalysisRecord:
        record = AnalysisRecord(
            name=component_name_from_path(file_path),
            custom_data={
                "comments": {
                    "source": "structured-comments",
                    "filePath": file_path,
                    "manual": True,
                }
            },
        )

        recognized = 0
        section: Optional[str] = None
        for line in (line.strip() for line in text.splitlines()):
            if not line:
                continue

            if line.startswith("-") and section in LIST_SECTIONS:
                if section == "props":
                    match = PROP_ENTRY_PATTERN.match(line)
                    if match:
                        name, prop_type, description = match.groups()
                        record.props.append(
                            PropDescriptor(
                                name=name,
                                type=prop_type.replace("?", "").strip(),
                                required="?" not in prop_type,
                                description=description.strip() or None,
                            )
                        )
                        recognized += 1
                else:
                    match = EXAMPLE_ENTRY_PATTERN.match(line)
                    if match:
                        record.examples.append(
                            ExampleDescriptor(
                                title=match.group(1).strip(), code=match.group(2).strip()
                            )
                        )
                        recognized += 1
                continue

            match = STRUCTURED_KEY_PATTERN.match(line)
            if not match:
                continue
            key, value = match.group(1).lower(), match.group(2).strip()
            section = key if key in LIST_SECTIONS else None
            if self._apply_field(record, key, value):
                recognized += 1

        if not recognized:
            raise ValueError("no recognizable @dsm fields")
        return record

    @staticmethod
    def _apply_field(record: AnalysisRecord, key: str, value: str) -> bool:
        def split_list(raw: str) -> List[str]:
            return [item.strip() for item in raw.split(",") if item.strip()]

        if key == "name" and value:
            record.name = value
        elif key == "description":
            record.description = value
        elif key == "category":
            record.category = value or None
        elif key == "tags":
            record.tags = split_list(value)
        elif key == "import":
            record.import_path = value or None
        elif key == "related":
            record.related_components = split_list(value)
        elif key == "dependencies":
            record.dependencies = split_list(value)
        elif key == "accessibility":
            record.accessibility_notes = [
                AccessibilityDescriptor(AccessibilityKind.OTHER, note)
                for note in split_list(value)
            ]
        elif key in LIST_SECTIONS:
            return True
        else:
            return False
        return True

    def extract_jsdoc_record(self, content: str, file_path: str) -> Optional[AnalysisRecord]:
        """Build a record from the JSDoc directly above the exported component."""
        name = component_name_from_path(file_path)
        pattern = re.compile(
            r"/\*\*((?:(?!\*/).)*?)\*/\s*export\s+(?:default\s+)?"
            r"(?:const\s+|function\s+|class\s+)?" + re.escape(name) + r"\b",
            re.DOTALL,
        )
        match = pattern.search(content)
        if not match:
            return None

        description = _jsdoc_description(match.group(1))
        if not description:
            return None

        return AnalysisRecord(
            name=name,
            description=description,
            custom_data={
                "comments": {"source": "jsdoc", "filePath": file_path, "manual": False}
            },
        )


def _strip_decoration(text: str) -> str:
    lines = []
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("*"):
            stripped = stripped[1:]
            if stripped.startswith(" "):
                stripped = stripped[1:]
        lines.append(stripped)
    return "\n".join(lines).strip()


def _jsdoc_description(text: str) -> str:
    lines = []
    for line in _strip_decoration(text).splitlines():
        line = line.strip()
        if line.startswith("@"):
            break
        if line:
            lines.append(line)
    return " ".join(lines)


def find_dsm_blocks(content: str) -> List[DsmBlock]:
    """
    Find every ``@dsm`` annotation in a source file.

    Args:
        content: Source text

    Returns:
        Blocks in file order, decoration stripped, text after ``@dsm`` only
    """
    blocks: List[DsmBlock] = []

    for match in BLOCK_COMMENT_PATTERN.finditer(content):
        body = _strip_decoration(match.group(1))
        marker = body.find("@dsm")
        if marker == -1:
            continue
        line = content.count("\n", 0, match.start()) + 1
        blocks.append(DsmBlock(body[marker + len("@dsm"):].strip(), line))

    current: List[str] = []
    start_line = 0
    previous_line = -2
    for match in LINE_COMMENT_PATTERN.finditer(content):
        line_number = content.count("\n", 0, match.start()) + 1
        text = match.group(1).strip()
        if current and line_number == previous_line + 1:
            current.append(text)
        else:
            if current:
                blocks.append(DsmBlock(_line_block_text(current), start_line))
            current = [text] if text.startswith("@dsm") else []
            start_line = line_number
        previous_line = line_number
        if not current:
            previous_line = -2
    if current:
        blocks.append(DsmBlock(_line_block_text(current), start_line))

    blocks.sort(key=lambda b: b.line)
    return blocks


def _line_block_text(lines: List[str]) -> str:
    first = lines[0][len("@dsm"):].strip()
    return "\n".join([first] + lines[1:]).strip()
