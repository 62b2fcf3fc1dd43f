"""
Component source analyzer.

This module inspects a component's source file with text heuristics to
extract props, slots, tags, category, dependencies, related components and
accessibility hints. The same inspector backs the ``analyze_component`` tool
offered to the model-backed analyzer.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..analysis.interfaces import BaseAnalyzer
from ..analysis.models import (
    AccessibilityDescriptor,
    AccessibilityKind,
    AnalysisRecord,
    AnalyzerResult,
    PipelineContext,
    PropDescriptor,
    SlotDescriptor,
)
from ..config.settings import EXCLUDED_DIRS
from ..discovery.story_discovery import find_component_file
from ..utils.component_naming import (
    build_import_statement,
    component_name_from_path,
    extract_exported_component_names,
)

logger = logging.getLogger(__name__)

MAX_RELATED_COMPONENTS = 5
MAX_RELATED_SCAN_FILES = 20

# Ordered: the first matching rule decides the category
CATEGORY_RULES = [
    (re.compile(r"button|link|anchor"), "actions"),
    (re.compile(r"input|textarea|select|checkbox|radio|form"), "forms"),
    (re.compile(r"modal|dialog|tooltip|popover|dropdown"), "overlays"),
    (re.compile(r"card|panel|container|layout|grid|flex"), "layout"),
    (re.compile(r"text|heading|title|paragraph|typography"), "typography"),
    (re.compile(r"icon|image|avatar|badge"), "media"),
    (re.compile(r"table|list|tree|data|chart"), "data-display"),
    (re.compile(r"tab|accordion|carousel|stepper"), "navigation"),
    (re.compile(r"alert|toast|notification|banner"), "feedback"),
    (re.compile(r"progress|spinner|skeleton|loading"), "indicators"),
]

CONTENT_TAG_RULES = [
    (re.compile(r"button", re.IGNORECASE), "interactive"),
    (re.compile(r"input|field", re.IGNORECASE), "form"),
    (re.compile(r"modal|dialog", re.IGNORECASE), "overlay"),
    (re.compile(r"card|panel", re.IGNORECASE), "layout"),
    (re.compile(r"icon|svg", re.IGNORECASE), "icon"),
    (re.compile(r"typography|\btext\b", re.IGNORECASE), "typography"),
    (re.compile(r"table|grid", re.IGNORECASE), "data-display"),
    (re.compile(r"aria-|role=|tabIndex"), "accessible"),
    (re.compile(r"keyboard|onKeyDown|onKeyUp"), "keyboard-navigation"),
]


class ComponentInspector:
    """Heuristic inspector for component source files."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.interface_pattern = re.compile(
            r"interface\s+\w*Props?\s*(?:extends[^{]*)?\{(.*?)\n\}", re.DOTALL
        )
        self.type_pattern = re.compile(r"type\s+\w*Props?\s*=\s*\{(.*?)\n\}", re.DOTALL)
        self.prop_line_pattern = re.compile(
            r"^\s*(?:readonly\s+)?(\w+)(\?)?\s*:\s*([^;\n]+?)\s*;?\s*$"
        )
        self.prop_types_pattern = re.compile(r"\.propTypes\s*=\s*\{(.*?)\}", re.DOTALL)
        self.prop_type_entry_pattern = re.compile(
            r"^\s*(\w+)\s*:\s*PropTypes\.(\w+)"
        )
        self.jsdoc_pattern = re.compile(r"/\*\*(.*?)\*/", re.DOTALL)
        self.export_jsdoc_pattern = re.compile(
            r"/\*\*((?:(?!\*/).)*?)\*/\s*export\b", re.DOTALL
        )
        self.import_pattern = re.compile(
            r"import\s+(?:[\w*{}\s,]+\s+from\s+)?['\"`]([^'\"`]+)['\"`]"
        )
        self.render_slot_pattern = re.compile(
            r"\b(render[A-Z]\w*|\w+Slot)\s*\??\s*:", re.MULTILINE
        )
        self.default_value_pattern = re.compile(r"(\w+)\s*=\s*('[^']*'|\"[^\"]*\"|[\w.]+)")

    def inspect(
        self,
        component_file: str,
        story_file: Optional[str] = None,
        framework: str = "react",
        base_import_path: Optional[str] = None,
        find_related: bool = True,
    ) -> Dict[str, Any]:
        """
        Inspect a component file.

        Args:
            component_file: Path to the component source
            story_file: Path to the story file for extra context (optional)
            framework: Target framework
            base_import_path: Base import path for the design system
            find_related: Scan sibling directories for components that use this one

        Returns:
            Dictionary with name, description, props, slots, tags, category,
            dependencies, relatedComponents, importPath and accessibility
        """
        component_content = _read_if_exists(component_file)
        story_content = _read_if_exists(story_file) if story_file else ""

        name = self.extract_name(component_file, component_content)
        props = self.extract_props(component_content, framework)

        return {
            "name": name,
            "description": self.extract_description(component_content, story_content),
            "props": [p.to_dict() for p in props],
            "slots": [s.to_dict() for s in self.extract_slots(component_content, framework)],
            "tags": self.generate_tags(component_content, story_content, props),
            "category": self.determine_category(component_content, story_content),
            "dependencies": self.extract_dependencies(component_content),
            "relatedComponents": (
                self.find_related_components(component_file, name) if find_related else []
            ),
            "importPath": build_import_statement(name, component_file, base_import_path),
            "accessibility": self.extract_accessibility(component_content, story_content),
        }

    def extract_name(self, file_path: str, content: str) -> str:
        names = extract_exported_component_names(content)
        return names[0] if names else component_name_from_path(file_path)

    def extract_description(self, component_content: str, story_content: str) -> str:
        # JSDoc directly above an export describes the component itself
        for match in self.export_jsdoc_pattern.finditer(component_content):
            text = clean_jsdoc(match.group(1))
            if text and "@dsm" not in match.group(1):
                return text

        for match in self.jsdoc_pattern.finditer(component_content):
            text = clean_jsdoc(match.group(1))
            if text and "@dsm" not in match.group(1):
                return text

        title = re.search(r"title:\s*['\"`]([^'\"`]+)['\"`]", story_content)
        if title:
            return f"{title.group(1)} component"

        comment = re.search(
            r"//\s*([^\n]+)\s*\nexport\s+(?:default\s+)?(?:const\s+|function\s+|class\s+)?\w+",
            component_content,
        )
        if comment:
            return comment.group(1).strip()

        return "A reusable component"

    def extract_props(self, content: str, framework: str = "react") -> List[PropDescriptor]:
        if framework != "react":
            return []

        props: List[PropDescriptor] = []
        body_match = self.interface_pattern.search(content) or self.type_pattern.search(
            content
        )
        defaults = self._destructured_defaults(content)

        if body_match:
            pending_doc = None
            for line in body_match.group(1).splitlines():
                stripped = line.strip()
                if stripped.startswith("/**"):
                    pending_doc = clean_jsdoc(stripped[3:].rstrip("*/"))
                    continue
                match = self.prop_line_pattern.match(line)
                if not match:
                    continue
                name, optional, prop_type = match.groups()
                props.append(
                    PropDescriptor(
                        name=name,
                        type=prop_type.strip(),
                        required=not optional,
                        description=pending_doc or None,
                        default_value=defaults.get(name),
                    )
                )
                pending_doc = None

        if not props:
            prop_types = self.prop_types_pattern.search(content)
            if prop_types:
                for entry in prop_types.group(1).split(","):
                    match = self.prop_type_entry_pattern.match(entry)
                    if match:
                        props.append(
                            PropDescriptor(
                                name=match.group(1),
                                type=match.group(2),
                                required=".isRequired" in entry,
                                description=f"{match.group(1)} prop",
                            )
                        )

        return props

    def _destructured_defaults(self, content: str) -> Dict[str, str]:
        # Defaults from `({ variant = 'primary', ... }: Props)` signatures
        signature = re.search(r"\(\s*\{([^}]*)\}\s*:\s*\w*Props", content)
        if not signature:
            return {}
        return {
            name: value.strip("'\"")
            for name, value in self.default_value_pattern.findall(signature.group(1))
        }

    def extract_slots(self, content: str, framework: str = "react") -> List[SlotDescriptor]:
        if framework != "react":
            return []

        slots: List[SlotDescriptor] = []
        if "children" in content:
            slots.append(
                SlotDescriptor(
                    name="children",
                    description="Child elements to render inside the component",
                    required=False,
                )
            )

        seen = {"children"}
        for match in self.render_slot_pattern.finditer(content):
            slot_name = re.sub(r"render|slot", "", match.group(1), flags=re.IGNORECASE)
            slot_name = slot_name[:1].lower() + slot_name[1:]
            if slot_name and slot_name not in seen:
                seen.add(slot_name)
                slots.append(
                    SlotDescriptor(
                        name=slot_name,
                        description=f"Slot for {slot_name} content",
                        required=False,
                    )
                )
        return slots

    def generate_tags(
        self, component_content: str, story_content: str, props: List[PropDescriptor]
    ) -> List[str]:
        tags: List[str] = []

        def add(tag: str):
            if tag not in tags:
                tags.append(tag)

        if re.search(r"import\s+React\b|from\s+['\"]react['\"]", component_content):
            add("react")
        for pattern, tag in CONTENT_TAG_RULES:
            if pattern.search(component_content):
                add(tag)

        if re.search(r"disabled", story_content, re.IGNORECASE):
            add("stateful")
        if re.search(r"variant|size", story_content, re.IGNORECASE):
            add("customizable")

        prop_names = [p.name.lower() for p in props]
        if any("variant" in n for n in prop_names):
            add("variants")
        if any("size" in n for n in prop_names):
            add("sizing")
        if any("color" in n for n in prop_names):
            add("theming")

        return tags

    def determine_category(self, component_content: str, story_content: str) -> str:
        content = (component_content + story_content).lower()
        for pattern, category in CATEGORY_RULES:
            if pattern.search(content):
                return category
        return "general"

    def extract_dependencies(self, content: str) -> List[str]:
        dependencies: List[str] = []
        for module in self.import_pattern.findall(content):
            if module.startswith((".", "/")):
                continue
            if module not in dependencies:
                dependencies.append(module)
        return dependencies

    def find_related_components(self, component_file: str, name: str) -> List[str]:
        """Components in sibling directories that reference this one."""
        if not component_file or not os.path.isfile(component_file):
            return []

        component_path = Path(component_file).resolve()
        search_root = component_path.parent.parent
        related: List[str] = []
        scanned = 0

        for candidate in sorted(search_root.rglob("*")):
            if scanned >= MAX_RELATED_SCAN_FILES or len(related) >= MAX_RELATED_COMPONENTS:
                break
            if candidate.suffix not in (".tsx", ".ts", ".jsx", ".js"):
                continue
            if any(part in EXCLUDED_DIRS for part in candidate.parts):
                continue
            if re.search(r"\.(test|spec|stories)\.", candidate.name):
                continue
            if candidate.resolve() == component_path or not candidate.is_file():
                continue

            scanned += 1
            content = _read_if_exists(str(candidate))
            if name not in content:
                continue
            for exported in extract_exported_component_names(content):
                if exported != name and exported not in related:
                    related.append(exported)
                    break

        return related[:MAX_RELATED_COMPONENTS]

    def extract_accessibility(
        self, component_content: str, story_content: str
    ) -> Dict[str, List[str]]:
        content = component_content + story_content
        return {
            "ariaLabels": _unique(re.findall(r"aria-\w+", content)),
            "keyboardSupport": _unique(re.findall(r"on(?:Key\w+)", content)),
            "semanticRoles": _unique(re.findall(r"role=['\"`{]+(\w+)['\"`}]+", content)),
        }


def clean_jsdoc(text: str) -> str:
    """Strip comment decoration and return the leading description lines."""
    lines = []
    for line in text.splitlines():
        line = line.strip().lstrip("*").strip()
        if line.startswith("@"):
            break
        if line:
            lines.append(line)
    return " ".join(lines)


def accessibility_notes_from_analysis(
    accessibility: Dict[str, List[str]]
) -> List[AccessibilityDescriptor]:
    notes = []
    for value in accessibility.get("ariaLabels", []):
        notes.append(AccessibilityDescriptor(AccessibilityKind.ARIA_LABEL, value))
    for value in accessibility.get("keyboardSupport", []):
        notes.append(AccessibilityDescriptor(AccessibilityKind.KEYBOARD_SUPPORT, value))
    for value in accessibility.get("semanticRoles", []):
        notes.append(AccessibilityDescriptor(AccessibilityKind.SEMANTIC_ROLE, value))
    return notes


def _unique(items: List[str]) -> List[str]:
    return list(dict.fromkeys(items))


def _read_if_exists(path: Optional[str]) -> str:
    if not path or not os.path.isfile(path):
        return ""
    try:
        with open(path, "r", encoding="utf-8", errors="ignore") as f:
            return f.read()
    except OSError as e:
        logger.warning(f"Could not read {path}: {e}")
        return ""


class SourceAnalyzer(BaseAnalyzer):
    """Extract props, slots and accessibility hints from component sources."""

    def __init__(self, inspector: ComponentInspector = None):
        super().__init__(
            name="source",
            description="Extracts props, slots, dependencies and accessibility hints "
            "from component source files",
        )
        self.inspector = inspector or ComponentInspector()

    def get_config_schema(self):
        return {
            "findRelated": {
                "type": "boolean",
                "description": "Scan nearby files for related components",
                "default": True,
            },
        }

    def can_handle(self, context: PipelineContext) -> bool:
        if context.component_file_path:
            return True
        return bool(context.story_file_path and find_component_file(context.story_file_path))

    def _run_impl(self, context: PipelineContext) -> AnalyzerResult:
        component_file = context.component_file_path or find_component_file(
            context.story_file_path
        )
        if not component_file or not os.path.isfile(component_file):
            raise FileNotFoundError(f"Component file not found: {component_file}")

        analysis = self.inspector.inspect(
            component_file,
            context.story_file_path,
            context.framework,
            context.base_import_path,
            find_related=bool(self.option(context, "findRelated")),
        )

        record = AnalysisRecord(
            name=analysis["name"],
            description=analysis["description"],
            category=analysis["category"],
            tags=analysis["tags"],
            import_path=analysis["importPath"],
            props=[PropDescriptor.from_dict(p) for p in analysis["props"]],
            slots=[SlotDescriptor.from_dict(s) for s in analysis["slots"]],
            dependencies=analysis["dependencies"],
            related_components=analysis["relatedComponents"],
            accessibility_notes=accessibility_notes_from_analysis(analysis["accessibility"]),
            custom_data={"source": {"componentFile": component_file}},
        )

        return self.create_result([record], componentFile=component_file)
