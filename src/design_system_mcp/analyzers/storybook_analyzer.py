"""
Storybook story file analyzer.

Reads a story file's title, tags, docs description and story exports with
shallow regular expressions, and names the components after the exports of
the companion component file.
"""

import re
from typing import Dict, List, Optional

from ..analysis.interfaces import BaseAnalyzer
from ..analysis.models import (
    AnalysisRecord,
    AnalyzerResult,
    ExampleDescriptor,
    PipelineContext,
)
from ..discovery.story_discovery import find_component_file, story_base_name
from ..utils.component_naming import (
    build_import_statement,
    extract_exported_component_names,
    kebab_to_pascal,
)


class StorybookAnalyzer(BaseAnalyzer):
    """Extract component information from Storybook story files."""

    def __init__(self):
        super().__init__(
            name="storybook",
            description="Extracts component information from Storybook files and "
            "component source code",
        )
        self.title_pattern = re.compile(r"title:\s*['\"`]([^'\"`]+)['\"`]")
        self.tags_pattern = re.compile(r"tags:\s*\[([^\]]*)\]")
        self.component_description_pattern = re.compile(
            r"description:\s*\{\s*component:\s*['\"`]([^'\"`]+)['\"`]"
        )
        self.docs_description_pattern = re.compile(
            r"docs:\s*\{[^}]*description:\s*['\"`]([^'\"`]+)['\"`]"
        )
        self.story_export_pattern = re.compile(
            r"export\s+const\s+([A-Z]\w*)\s*(?::\s*[\w.]+(?:<[^>]*>)?)?\s*=",
        )
        self.args_pattern = re.compile(r"args:\s*\{([^}]*)\}", re.DOTALL)

    def get_config_schema(self):
        return {
            "extractExamples": {
                "type": "boolean",
                "description": "Extract code examples from stories",
                "default": True,
            },
            "parseComponentFile": {
                "type": "boolean",
                "description": "Name components after the component file exports",
                "default": True,
            },
        }

    def can_handle(self, context: PipelineContext) -> bool:
        return bool(context.story_file_path)

    def _run_impl(self, context: PipelineContext) -> AnalyzerResult:
        story_path = context.story_file_path
        content = self.read_file_content(story_path)
        base_name = story_base_name(story_path)

        component_file = context.component_file_path or find_component_file(story_path)

        names: List[str] = []
        if component_file and self.option(context, "parseComponentFile"):
            names = extract_exported_component_names(self.read_file_content(component_file))
        if not names:
            names = [kebab_to_pascal(base_name)]

        title = self._match(self.title_pattern, content) or base_name
        tags = self._extract_tags(content)
        description = (
            self._match(self.component_description_pattern, content)
            or self._match(self.docs_description_pattern, content)
            or f"Component from {title}"
        )
        stories = self._extract_stories(content)

        records = []
        for name in names:
            examples = []
            if self.option(context, "extractExamples"):
                examples = [
                    ExampleDescriptor(title=story_name, code=self._render_example(name, args))
                    for story_name, args in stories
                ]
            records.append(
                AnalysisRecord(
                    name=name,
                    description=description,
                    category=self._category_from_title(title),
                    tags=list(tags),
                    import_path=build_import_statement(
                        name, component_file, context.base_import_path
                    ),
                    examples=examples,
                    custom_data={
                        "storybook": {
                            "storyFile": story_path,
                            "componentFile": component_file,
                            "framework": context.framework,
                            "title": title,
                            "variants": [story_name for story_name, _ in stories],
                        }
                    },
                )
            )

        self.logger.debug(f"Found {len(records)} component(s) in {story_path}")
        return self.create_result(
            records,
            storyFile=story_path,
            componentFile=component_file,
            framework=context.framework,
        )

    @staticmethod
    def _match(pattern: re.Pattern, content: str) -> Optional[str]:
        match = pattern.search(content)
        return match.group(1).strip() if match else None

    def _extract_tags(self, content: str) -> List[str]:
        match = self.tags_pattern.search(content)
        if not match:
            return ["component"]
        tags = [t.strip().strip("'\"`") for t in match.group(1).split(",")]
        return [t for t in tags if t] or ["component"]

    @staticmethod
    def _category_from_title(title: str) -> Optional[str]:
        # "Components/Forms/Input" -> "forms"
        parts = [p.strip() for p in title.split("/") if p.strip()]
        if len(parts) >= 3:
            return parts[-2].lower()
        return None

    def _extract_stories(self, content: str) -> List[tuple]:
        matches = list(self.story_export_pattern.finditer(content))
        stories = []
        for index, match in enumerate(matches):
            end = matches[index + 1].start() if index + 1 < len(matches) else len(content)
            body = content[match.end():end]
            args_match = self.args_pattern.search(body)
            args = self._parse_args(args_match.group(1)) if args_match else {}
            stories.append((match.group(1), args))
        return stories

    @staticmethod
    def _parse_args(body: str) -> Dict[str, str]:
        args = {}
        for entry in body.split(","):
            if ":" not in entry:
                continue
            key, value = entry.split(":", 1)
            key = key.strip().strip("'\"")
            if re.match(r"^\w+$", key):
                args[key] = value.strip()
        return args

    @staticmethod
    def _render_example(name: str, args: Dict[str, str]) -> str:
        attributes = []
        children = None
        for key, raw in args.items():
            if key == "children":
                children = raw.strip("'\"`")
            elif re.match(r"^['\"`].*['\"`]$", raw):
                attributes.append(f'{key}="{raw[1:-1]}"')
            elif raw == "true":
                attributes.append(key)
            else:
                attributes.append(f"{key}={{{raw}}}")

        opening = " ".join([name] + attributes)
        if children is not None:
            return f"<{opening}>{children}</{name}>"
        return f"<{opening} />"
