"""
Model-backed component analyzer.

Asks an OpenAI-compatible chat model to analyze a component. The model can
call an ``analyze_component`` tool backed by the source inspector; the
conversation is bounded to a fixed number of rounds and tools are disabled
after the first tool round. The free-text answer is then mined for
descriptions, tags, accessibility hints, suggestions and best practices.
"""

import copy
import json
import re
from typing import Any, Callable, Dict, List, Optional

from ..analysis.interfaces import BaseAnalyzer
from ..analysis.merge import merge_accessibility, ordered_union
from ..analysis.models import (
    AccessibilityDescriptor,
    AccessibilityKind,
    AnalysisRecord,
    AnalyzerResult,
    PipelineContext,
)
from ..clients.llm_api_client import (
    create_chat_completion,
    get_chat_client,
    get_chat_model,
)
from ..discovery.story_discovery import find_component_file, story_base_name
from .source_analyzer import ComponentInspector

DEFAULT_MAX_DEPTH = 5
MAX_SUGGESTIONS = 5
MAX_BEST_PRACTICES = 3
MAX_DEPTH_MESSAGE = "Maximum processing depth reached. Please try a simpler request."

SYSTEM_PROMPT = """You are a specialized agent for analyzing components and generating comprehensive design system context.

Your role is to:
1. Use the component analyzer tool to extract detailed information from component and story files
2. Analyze props, slots, dependencies, related components, and accessibility features
3. Generate intelligent tags and categorization based on component behavior
4. Provide enhanced descriptions and usage guidance
5. Suggest improvements for component discoverability and documentation

IMPORTANT: Always start by using the analyze_component tool with the provided file paths. Use the analysis results to generate comprehensive, actionable insights about the component.

Focus on providing value beyond basic parsing - offer design system integration advice, usage patterns, and improvement suggestions."""

ANALYZE_COMPONENT_TOOL = {
    "type": "function",
    "function": {
        "name": "analyze_component",
        "description": "Analyze a component file and extract comprehensive information "
        "including props, slots, dependencies, and related components",
        "parameters": {
            "type": "object",
            "properties": {
                "componentFilePath": {
                    "type": "string",
                    "description": "Path to the component file to analyze",
                },
                "storyFilePath": {
                    "type": "string",
                    "description": "Path to the story file for additional context",
                },
                "framework": {
                    "type": "string",
                    "description": "Framework being used (react, vue, angular, etc.)",
                },
                "baseImportPath": {
                    "type": "string",
                    "description": "Base import path for the design system",
                },
            },
            "required": ["componentFilePath", "storyFilePath"],
        },
    },
}

SUGGESTION_PATTERNS = [
    re.compile(r"(?:suggest|recommend|consider)[\s:]+[^\n.]+", re.IGNORECASE),
    re.compile(r"(?:should|could|might)\s+[^\n.]+", re.IGNORECASE),
]
BEST_PRACTICE_PATTERNS = [
    re.compile(r"best practices?[\s:]+[^\n.]+", re.IGNORECASE),
    re.compile(r"(?:ensure|implement|use)\s+[^\n.]+", re.IGNORECASE),
]
INFERRED_TAG_WORDS = ["interactive", "accessible", "customizable", "responsive"]


class OpenAIAnalyzer(BaseAnalyzer):
    """Enhance component analysis with a chat model."""

    def __init__(
        self,
        client_factory: Callable[..., Any] = get_chat_client,
        inspector: ComponentInspector = None,
    ):
        super().__init__(
            name="openai",
            description="Uses AI to provide enhanced component analysis, documentation "
            "suggestions, and best practices",
        )
        self.client_factory = client_factory
        self.inspector = inspector or ComponentInspector()

    def get_config_schema(self):
        return {
            "model": {
                "type": "string",
                "description": "Chat model to use (defaults to CHAT_MODEL)",
                "default": None,
            },
            "temperature": {
                "type": "number",
                "description": "Temperature for AI responses",
                "default": 0.3,
            },
            "maxTokens": {
                "type": "number",
                "description": "Maximum tokens for AI response",
                "default": 2000,
            },
            "timeout": {
                "type": "number",
                "description": "Request timeout in seconds",
                "default": 30,
            },
            "maxDepth": {
                "type": "number",
                "description": "Maximum model rounds per analysis",
                "default": DEFAULT_MAX_DEPTH,
            },
            "enhanceExisting": {
                "type": "boolean",
                "description": "Enhance existing component data rather than replace it",
                "default": True,
            },
        }

    def can_handle(self, context: PipelineContext) -> bool:
        return bool(context.story_file_path)

    def _run_impl(self, context: PipelineContext) -> AnalyzerResult:
        model = get_chat_model(self.option(context, "model"))
        previous = [
            record
            for result in context.find_results("storybook")
            for record in result.records
        ]

        analysis = self.request_analysis(context, model, previous)

        if previous and self.option(context, "enhanceExisting"):
            records = [self.enhance_record(record, analysis, model) for record in previous]
        else:
            records = [self.record_from_analysis(context, analysis, model)]

        return self.create_result(
            records,
            storyFile=context.story_file_path,
            componentFile=context.component_file_path,
            aiModel=model,
            rawAnalysis=analysis,
        )

    def request_analysis(
        self,
        context: PipelineContext,
        model: str,
        previous: List[AnalysisRecord],
    ) -> str:
        """
        Run the bounded tool-calling conversation and return the final text.

        Args:
            context: Pipeline context
            model: Chat model name
            previous: Records from the storybook analyzer used as baseline

        Returns:
            The model's final answer
        """
        client = self.client_factory(timeout=self.option(context, "timeout"))
        messages: List[Dict[str, Any]] = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": self._build_prompt(context, previous)},
        ]
        tool_choice = "auto"
        max_depth = int(self.option(context, "maxDepth") or DEFAULT_MAX_DEPTH)

        for depth in range(max_depth):
            response = create_chat_completion(
                client,
                model,
                messages,
                tools=[ANALYZE_COMPONENT_TOOL],
                tool_choice=tool_choice,
                temperature=self.option(context, "temperature"),
                max_tokens=int(self.option(context, "maxTokens")),
            )
            message = response.choices[0].message
            tool_calls = message.tool_calls or []
            if not tool_calls:
                return message.content or ""

            self.logger.debug(f"Model requested {len(tool_calls)} tool call(s) at depth {depth}")
            messages.append(
                {
                    "role": "assistant",
                    "content": message.content,
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {
                                "name": call.function.name,
                                "arguments": call.function.arguments,
                            },
                        }
                        for call in tool_calls
                    ],
                }
            )
            for call in tool_calls:
                messages.append(
                    {
                        "role": "tool",
                        "tool_call_id": call.id,
                        "content": self.handle_tool_call(
                            call.function.name, call.function.arguments, context
                        ),
                    }
                )
            tool_choice = "none"

        self.logger.warning(f"Max depth {max_depth} reached for {context.story_file_path}")
        return MAX_DEPTH_MESSAGE

    def handle_tool_call(self, name: str, arguments: str, context: PipelineContext) -> str:
        """Execute a tool call requested by the model and return its content."""
        if name != ANALYZE_COMPONENT_TOOL["function"]["name"]:
            return f"Unknown tool: {name}"
        try:
            args = json.loads(arguments or "{}")
            component_file = (
                args.get("componentFilePath")
                or context.component_file_path
                or find_component_file(context.story_file_path)
            )
            analysis = self.inspector.inspect(
                component_file,
                args.get("storyFilePath") or context.story_file_path,
                args.get("framework") or context.framework,
                args.get("baseImportPath") or context.base_import_path,
            )
            return json.dumps(analysis, indent=2)
        except (ValueError, TypeError, OSError) as e:
            self.logger.error(f"Error in analyze_component tool: {e}")
            return f"Error analyzing component: {e}"

    def _build_prompt(self, context: PipelineContext, previous: List[AnalysisRecord]) -> str:
        context_info = ""
        if previous:
            baseline = json.dumps([r.to_dict() for r in previous], indent=2, default=str)
            context_info = (
                "\n\nAdditional Context from story file parsing:\n"
                f"{baseline}\n\n"
                "Use this as baseline context, but focus on using the analyze_component "
                "tool to get more detailed analysis."
            )

        component_file = (
            context.component_file_path
            or find_component_file(context.story_file_path)
            or "Not specified - try to infer from story file"
        )
        return (
            "Please analyze the component files and generate comprehensive design "
            "system context.\n\n"
            f"Story File: {context.story_file_path}\n"
            f"Component File: {component_file}\n"
            f"Framework: {context.framework}\n"
            f"Design Library: {context.design_library or 'none'}{context_info}\n\n"
            "INSTRUCTIONS:\n"
            "1. Start by using the analyze_component tool to get detailed component information\n"
            "2. Use the analysis results to provide enhanced insights and recommendations\n"
            "3. Focus on design system integration, usage patterns, and developer experience\n"
            "4. Suggest improvements for component discoverability and documentation"
        )

    def enhance_record(
        self, record: AnalysisRecord, analysis: str, model: str
    ) -> AnalysisRecord:
        """Copy a baseline record and enrich it with the model's analysis."""
        enhanced = copy.deepcopy(record)
        enhanced.description = enhance_description(record.description, analysis)
        enhanced.tags = ordered_union(record.tags, extract_tags(analysis))
        enhanced.accessibility_notes = merge_accessibility(
            record.accessibility_notes, extract_accessibility(analysis)
        )
        enhanced.custom_data["openai"] = {
            "analysis": analysis,
            "enhancedBy": model,
            "suggestions": extract_suggestions(analysis),
            "bestPractices": extract_best_practices(analysis),
        }
        return enhanced

    def record_from_analysis(
        self, context: PipelineContext, analysis: str, model: str
    ) -> AnalysisRecord:
        return AnalysisRecord(
            name=extract_component_name(context.story_file_path, analysis),
            description=extract_description(analysis),
            category=extract_category(analysis),
            tags=extract_tags(analysis),
            custom_data={
                "openai": {
                    "analysis": analysis,
                    "extractedBy": model,
                    "suggestions": extract_suggestions(analysis),
                    "bestPractices": extract_best_practices(analysis),
                }
            },
        )


def enhance_description(original: str, analysis: str) -> str:
    match = re.search(r"Description[:\-\s]*([^\n]+)", analysis, re.IGNORECASE)
    if match and len(match.group(1).strip()) > len(original or ""):
        return match.group(1).strip()
    return original


def extract_description(analysis: str) -> str:
    match = re.search(r"(?:Description|Overview)[:\-\s]*([^\n]+)", analysis, re.IGNORECASE)
    return match.group(1).strip() if match else "AI-analyzed component"


def extract_component_name(story_path: Optional[str], analysis: str) -> str:
    match = re.search(r"(?:Component|Name)[:\-\s]*([A-Z][a-zA-Z]+)", analysis)
    if match:
        return match.group(1)
    base = story_base_name(story_path or "") or "Unknown"
    return base[:1].upper() + base[1:]


def extract_category(analysis: str) -> str:
    match = re.search(r"Category[:\-\s]*([^\n]+)", analysis, re.IGNORECASE)
    if match:
        return match.group(1).strip().lower()

    content = analysis.lower()
    if "button" in content or "action" in content:
        return "actions"
    if "input" in content or "form" in content:
        return "forms"
    if "modal" in content or "dialog" in content:
        return "overlays"
    if "layout" in content or "container" in content:
        return "layout"
    return "general"


def extract_tags(analysis: str) -> List[str]:
    tags: List[str] = []
    match = re.search(r"Tags?[:\-\s]*([^\n]+)", analysis, re.IGNORECASE)
    if match:
        for raw in re.split(r"[,\s]+", match.group(1)):
            tag = re.sub(r"[^\w-]", "", raw.lower())
            if tag and tag not in tags:
                tags.append(tag)

    content = analysis.lower()
    for word in INFERRED_TAG_WORDS:
        if word in content and word not in tags:
            tags.append(word)
    return tags


def extract_accessibility(analysis: str) -> List[AccessibilityDescriptor]:
    notes: List[AccessibilityDescriptor] = []
    for aria in re.findall(r"aria[- ]?[a-zA-Z]+", analysis, re.IGNORECASE):
        notes.append(
            AccessibilityDescriptor(
                AccessibilityKind.ARIA_LABEL, aria, "AI-suggested ARIA attribute"
            )
        )
    if "keyboard" in analysis.lower():
        notes.append(
            AccessibilityDescriptor(
                AccessibilityKind.KEYBOARD_SUPPORT,
                "keyboard-navigation",
                "AI-identified keyboard support requirement",
            )
        )
    return merge_accessibility([], notes)


def _collect(patterns: List[re.Pattern], analysis: str, limit: int) -> List[str]:
    found: List[str] = []
    for pattern in patterns:
        found.extend(match.strip() for match in pattern.findall(analysis))
    return found[:limit]


def extract_suggestions(analysis: str) -> List[str]:
    return _collect(SUGGESTION_PATTERNS, analysis, MAX_SUGGESTIONS)


def extract_best_practices(analysis: str) -> List[str]:
    return _collect(BEST_PRACTICE_PATTERNS, analysis, MAX_BEST_PRACTICES)
