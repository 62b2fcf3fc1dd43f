"""
Data models for component analysis.

This module contains the dataclasses exchanged between analyzers, the
analyzer pipeline and the merge engine. Every model serializes to the
camelCase JSON shape used in generated context files via ``to_dict`` and
can be rebuilt leniently from such a dictionary via ``from_dict``.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple


class DiagnosticLevel(str, Enum):
    """Severity of a diagnostic message."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class AccessibilityKind(str, Enum):
    """Kind of accessibility note attached to a component."""

    ARIA_LABEL = "aria-label"
    KEYBOARD_SUPPORT = "keyboard-support"
    SEMANTIC_ROLE = "semantic-role"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "AccessibilityKind":
        """Map a raw value onto a kind, falling back to OTHER."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError:
            return cls.OTHER


class MergeStrategy(str, Enum):
    """Policy used to fold analyses of the same component together."""

    APPEND = "append"
    MERGE = "merge"
    OVERRIDE = "override"

    @classmethod
    def parse(cls, value: Any) -> "MergeStrategy":
        """
        Parse a merge strategy from a string or enum value.

        Args:
            value: Strategy name, case-insensitive

        Returns:
            MergeStrategy member

        Raises:
            ConfigurationError: If the value is not a known strategy
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            from .exceptions import ConfigurationError

            raise ConfigurationError(
                f"Unknown merge strategy '{value}'. "
                f"Expected one of: {', '.join(s.value for s in cls)}",
                config_key="merge_strategy",
                config_value=str(value),
            )


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _optional_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def _str_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value if item is not None]


@dataclass
class PropDescriptor:
    """A single component property."""

    name: str
    # None means the analyzer did not determine the field
    type: Optional[str] = None
    required: Optional[bool] = None
    description: Optional[str] = None
    default_value: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "type": self.type or "unknown",
            "required": bool(self.required),
        }
        if self.description is not None:
            data["description"] = self.description
        if self.default_value is not None:
            data["defaultValue"] = self.default_value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PropDescriptor":
        return cls(
            name=str(data.get("name", "")),
            type=_optional_str(data.get("type") or None),
            required=_optional_bool(data.get("required")),
            description=_optional_str(data.get("description")),
            default_value=_optional_str(
                data.get("defaultValue", data.get("default_value"))
            ),
        )


@dataclass
class SlotDescriptor:
    """A named content slot, such as ``children`` or a render prop."""

    name: str
    description: Optional[str] = None
    required: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "required": bool(self.required)}
        if self.description is not None:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SlotDescriptor":
        return cls(
            name=str(data.get("name", "")),
            description=_optional_str(data.get("description")),
            required=_optional_bool(data.get("required")),
        )


@dataclass
class ExampleDescriptor:
    """A titled usage example."""

    title: str
    code: str = ""
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"title": self.title, "code": self.code}
        if self.description is not None:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExampleDescriptor":
        return cls(
            title=str(data.get("title", "")),
            code=str(data.get("code") or ""),
            description=_optional_str(data.get("description")),
        )


@dataclass
class AccessibilityDescriptor:
    """An accessibility note; identity is the (kind, value) pair."""

    kind: AccessibilityKind
    value: str
    description: Optional[str] = None

    @property
    def identity(self) -> Tuple[str, str]:
        return (self.kind.value, self.value)

    def to_dict(self) -> Dict[str, Any]:
        data = {"type": self.kind.value, "value": self.value}
        if self.description is not None:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AccessibilityDescriptor":
        return cls(
            kind=AccessibilityKind.parse(data.get("type", data.get("kind"))),
            value=str(data.get("value", "")),
            description=_optional_str(data.get("description")),
        )


@dataclass
class AnalysisRecord:
    """
    One analyzer's description of one component.

    Set-like collections (tags, dependencies, related components) are kept
    as lists in first-appearance order so serialized output is stable.
    """

    name: str
    description: str = ""
    category: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    import_path: Optional[str] = None
    props: List[PropDescriptor] = field(default_factory=list)
    slots: List[SlotDescriptor] = field(default_factory=list)
    examples: List[ExampleDescriptor] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    related_components: List[str] = field(default_factory=list)
    accessibility_notes: List[AccessibilityDescriptor] = field(default_factory=list)
    custom_data: Dict[str, Any] = field(default_factory=dict)

    def entity_key(self) -> str:
        """Case-insensitive identity key for merging."""
        return (self.name or "").strip().lower()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "tags": list(self.tags),
            "importPath": self.import_path,
            "props": [prop.to_dict() for prop in self.props],
            "slots": [slot.to_dict() for slot in self.slots],
            "examples": [example.to_dict() for example in self.examples],
            "dependencies": list(self.dependencies),
            "relatedComponents": list(self.related_components),
            "accessibility": [note.to_dict() for note in self.accessibility_notes],
            "customData": dict(self.custom_data),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalysisRecord":
        """Build a record from a dictionary, tolerating missing fields."""
        return cls(
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            category=_optional_str(data.get("category")),
            tags=_str_list(data.get("tags")),
            import_path=_optional_str(
                data.get("importPath", data.get("import_path"))
            ),
            props=[
                PropDescriptor.from_dict(p)
                for p in data.get("props") or []
                if isinstance(p, Mapping)
            ],
            slots=[
                SlotDescriptor.from_dict(s)
                for s in data.get("slots") or []
                if isinstance(s, Mapping)
            ],
            examples=[
                ExampleDescriptor.from_dict(e)
                for e in data.get("examples") or []
                if isinstance(e, Mapping)
            ],
            dependencies=_str_list(data.get("dependencies")),
            related_components=_str_list(
                data.get("relatedComponents", data.get("related_components"))
            ),
            accessibility_notes=[
                AccessibilityDescriptor.from_dict(a)
                for a in data.get("accessibility", data.get("accessibility_notes"))
                or []
                if isinstance(a, Mapping)
            ],
            custom_data=dict(data.get("customData", data.get("custom_data")) or {}),
        )


@dataclass
class Diagnostic:
    """Leveled, non-fatal message produced during analysis or merging."""

    level: DiagnosticLevel
    message: str
    source: Optional[str] = None
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"level": self.level.value, "message": self.message}
        if self.source is not None:
            data["source"] = self.source
        if self.line is not None:
            data["line"] = self.line
        return data


@dataclass
class AnalyzerResult:
    """Full output of one analyzer invocation."""

    analyzer: str
    records: List[AnalysisRecord] = field(default_factory=list)
    timestamp: str = field(default_factory=utc_timestamp)
    metadata: Dict[str, Any] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "analyzer": self.analyzer,
            "timestamp": self.timestamp,
            "records": [record.to_dict() for record in self.records],
            "metadata": dict(self.metadata),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


@dataclass(frozen=True)
class PipelineContext:
    """
    Read-only input shared by every analyzer in a run.

    ``previous_results`` is always an immutable snapshot of the results
    produced by the analyzers that ran earlier in the same run. Derived
    contexts are created with ``dataclasses.replace``.
    """

    story_file_path: Optional[str] = None
    component_file_path: Optional[str] = None
    framework: str = "react"
    design_library: Optional[str] = None
    base_import_path: Optional[str] = None
    previous_results: Tuple[AnalyzerResult, ...] = ()
    config: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        if not isinstance(self.previous_results, tuple):
            object.__setattr__(self, "previous_results", tuple(self.previous_results))
        if not isinstance(self.config, MappingProxyType):
            object.__setattr__(self, "config", MappingProxyType(dict(self.config)))

    def find_results(self, analyzer: str) -> List[AnalyzerResult]:
        """Return earlier results produced by the given analyzer."""
        return [r for r in self.previous_results if r.analyzer == analyzer]


@dataclass
class StageConfig:
    """One entry of the analyzer chain."""

    name: str
    enabled: bool = True
    weight: int = 0
    config: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "enabled": self.enabled,
            "weight": self.weight,
            "config": dict(self.config),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StageConfig":
        return cls(
            name=str(data.get("name", "")),
            enabled=bool(data.get("enabled", True)),
            weight=int(data.get("weight", 0)),
            config=dict(data.get("config") or {}),
        )


@dataclass
class ChainConfig:
    """Declared analyzer chain plus its merge and error policies."""

    stages: List[StageConfig] = field(default_factory=list)
    merge_strategy: MergeStrategy = MergeStrategy.MERGE
    continue_on_error: bool = True

    def get_stage(self, name: str) -> Optional[StageConfig]:
        for stage in self.stages:
            if stage.name == name:
                return stage
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": True,
            "parsers": [stage.to_dict() for stage in self.stages],
            "mergeStrategy": self.merge_strategy.value,
            "continueOnError": self.continue_on_error,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChainConfig":
        stages = data.get("parsers", data.get("stages")) or []
        return cls(
            stages=[StageConfig.from_dict(s) for s in stages],
            merge_strategy=MergeStrategy.parse(
                data.get("mergeStrategy", data.get("merge_strategy", "merge"))
            ),
            continue_on_error=bool(
                data.get("continueOnError", data.get("continue_on_error", True))
            ),
        )


@dataclass
class MergedEntity:
    """Reconciled record for one component plus its history."""

    record: AnalysisRecord
    contributors: List[str] = field(default_factory=list)
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return self.record.entity_key()

    @property
    def name(self) -> str:
        return self.record.name

    def to_dict(self) -> Dict[str, Any]:
        data = self.record.to_dict()
        data["contributors"] = list(self.contributors)
        if self.provenance:
            data["provenance"] = dict(self.provenance)
        return data


@dataclass
class MergeOutcome:
    """Entities produced by a merge plus diagnostics raised along the way."""

    entities: List[MergedEntity] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def get(self, name: str) -> Optional[MergedEntity]:
        key = name.strip().lower()
        for entity in self.entities:
            if entity.key == key:
                return entity
        return None
