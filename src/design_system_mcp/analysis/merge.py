"""
Merge engine for analyzer results.

Folds the records of many analyzer results into one entity per component,
keyed by the normalized component name, under one of three strategies:

- ``append``: the first record is kept as-is; later records are stored
  verbatim as provenance.
- ``override``: the latest record replaces the entity; the previous one is
  kept as provenance.
- ``merge``: field-by-field reconciliation.

Merging never raises on malformed records and never mutates its inputs.
"""

import copy
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from .models import (
    AccessibilityDescriptor,
    AnalysisRecord,
    AnalyzerResult,
    Diagnostic,
    DiagnosticLevel,
    ExampleDescriptor,
    MergedEntity,
    MergeOutcome,
    MergeStrategy,
    PropDescriptor,
    SlotDescriptor,
)

logger = logging.getLogger(__name__)

# A new description replaces the existing one when it is this much longer
DESCRIPTION_GROWTH_FACTOR = 1.5

T = TypeVar("T")


def ordered_union(existing: Iterable[str], new: Iterable[str]) -> List[str]:
    """Set union that keeps first-appearance order."""
    seen = {}
    for item in list(existing or []) + list(new or []):
        if item not in seen:
            seen[item] = None
    return list(seen)


def merge_descriptions(existing: Optional[str], new: Optional[str]) -> str:
    if not existing:
        return new or ""
    if not new:
        return existing
    if existing == new:
        return existing
    if len(new) > len(existing) * DESCRIPTION_GROWTH_FACTOR:
        return new
    return existing


def _merge_keyed(
    existing: List[T],
    new: List[T],
    key: Callable[[T], Any],
    combine: Optional[Callable[[T, T], T]] = None,
) -> List[T]:
    merged: Dict[Any, T] = {}
    for item in existing:
        merged.setdefault(key(item), item)
    for item in new:
        item_key = key(item)
        if item_key not in merged:
            merged[item_key] = item
        elif combine is not None:
            merged[item_key] = combine(merged[item_key], item)
    return list(merged.values())


def _combine_props(existing: PropDescriptor, new: PropDescriptor) -> PropDescriptor:
    return PropDescriptor(
        name=existing.name,
        type=new.type if new.type is not None else existing.type,
        required=new.required if new.required is not None else existing.required,
        description=new.description or existing.description,
        default_value=(
            new.default_value if new.default_value is not None else existing.default_value
        ),
    )


def _combine_slots(existing: SlotDescriptor, new: SlotDescriptor) -> SlotDescriptor:
    return SlotDescriptor(
        name=existing.name,
        description=new.description or existing.description,
        required=new.required if new.required is not None else existing.required,
    )


def merge_props(
    existing: List[PropDescriptor], new: List[PropDescriptor]
) -> List[PropDescriptor]:
    return _merge_keyed(existing, new, lambda p: p.name, _combine_props)


def merge_slots(
    existing: List[SlotDescriptor], new: List[SlotDescriptor]
) -> List[SlotDescriptor]:
    return _merge_keyed(existing, new, lambda s: s.name, _combine_slots)


def merge_examples(
    existing: List[ExampleDescriptor], new: List[ExampleDescriptor]
) -> List[ExampleDescriptor]:
    """First example seen for a title wins; new titles are appended."""
    return _merge_keyed(existing, new, lambda e: e.title)


def merge_accessibility(
    existing: List[AccessibilityDescriptor], new: List[AccessibilityDescriptor]
) -> List[AccessibilityDescriptor]:
    return _merge_keyed(existing, new, lambda a: a.identity)


def _contribution_snapshot(record: AnalysisRecord) -> Dict[str, Any]:
    return {
        "description": record.description,
        "tags": list(record.tags),
        "props": [prop.to_dict() for prop in record.props],
        "accessibility": [note.to_dict() for note in record.accessibility_notes],
    }


class MergeEngine:
    """Reduces analyzer results to one merged entity per component."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def merge(
        self,
        results: List[AnalyzerResult],
        strategy: MergeStrategy = MergeStrategy.MERGE,
    ) -> MergeOutcome:
        """
        Merge analyzer results.

        Args:
            results: Results in execution order
            strategy: Merge strategy

        Returns:
            MergeOutcome with entities in first-seen order and diagnostics
        """
        strategy = MergeStrategy.parse(strategy)
        entities: Dict[str, MergedEntity] = {}
        diagnostics: List[Diagnostic] = []

        for result in results:
            for record in result.records:
                key = record.entity_key()
                if not key:
                    diagnostics.append(
                        Diagnostic(
                            level=DiagnosticLevel.WARNING,
                            message="Dropped record with empty component name",
                            source=result.analyzer,
                        )
                    )
                    continue

                record = copy.deepcopy(record)
                existing = entities.get(key)
                if existing is None:
                    entities[key] = self._seed(record, result.analyzer)
                elif strategy == MergeStrategy.APPEND:
                    self._append(existing, record, result.analyzer)
                elif strategy == MergeStrategy.OVERRIDE:
                    entities[key] = self._override(existing, record, result.analyzer)
                else:
                    self._merge_into(existing, record, result.analyzer)

        if diagnostics:
            self.logger.warning(f"Merge dropped {len(diagnostics)} record(s) without a name")

        return MergeOutcome(entities=list(entities.values()), diagnostics=diagnostics)

    def _seed(self, record: AnalysisRecord, analyzer: str) -> MergedEntity:
        record.custom_data["contributors"] = [analyzer]
        return MergedEntity(record=record, contributors=[analyzer])

    def _append(self, entity: MergedEntity, record: AnalysisRecord, analyzer: str) -> None:
        snapshot = record.to_dict()
        entity.provenance[f"{analyzer}_data"] = snapshot
        entity.record.custom_data[f"{analyzer}_data"] = copy.deepcopy(snapshot)
        entity.contributors.append(analyzer)
        entity.record.custom_data["contributors"] = list(entity.contributors)

    def _override(
        self, entity: MergedEntity, record: AnalysisRecord, analyzer: str
    ) -> MergedEntity:
        previous = entity.record.to_dict()
        previous["contributors"] = list(entity.contributors)
        record.custom_data["contributors"] = [analyzer]
        record.custom_data["previous"] = copy.deepcopy(previous)
        return MergedEntity(
            record=record,
            contributors=entity.contributors + [analyzer],
            provenance={"previous": previous},
        )

    def _merge_into(
        self, entity: MergedEntity, record: AnalysisRecord, analyzer: str
    ) -> None:
        existing = entity.record
        entity.contributors.append(analyzer)

        custom_data = dict(existing.custom_data)
        custom_data.update(record.custom_data)
        custom_data["contributors"] = list(entity.contributors)
        custom_data[f"{analyzer}_contribution"] = _contribution_snapshot(record)

        entity.record = AnalysisRecord(
            name=record.name or existing.name,
            description=merge_descriptions(existing.description, record.description),
            category=record.category or existing.category,
            tags=ordered_union(existing.tags, record.tags),
            import_path=record.import_path or existing.import_path,
            props=merge_props(existing.props, record.props),
            slots=merge_slots(existing.slots, record.slots),
            examples=merge_examples(existing.examples, record.examples),
            dependencies=ordered_union(existing.dependencies, record.dependencies),
            related_components=ordered_union(
                existing.related_components, record.related_components
            ),
            accessibility_notes=merge_accessibility(
                existing.accessibility_notes, record.accessibility_notes
            ),
            custom_data=custom_data,
        )


def merge_results(
    results: List[AnalyzerResult], strategy: MergeStrategy = MergeStrategy.MERGE
) -> MergeOutcome:
    """Merge results with a fresh engine."""
    return MergeEngine().merge(results, strategy)


def filter_ignored(
    entities: List[MergedEntity], ignore_names: Iterable[str]
) -> List[MergedEntity]:
    """Drop entities whose name is in the ignore list, case-insensitively."""
    ignored = {name.strip().lower() for name in ignore_names or []}
    if not ignored:
        return list(entities)
    return [entity for entity in entities if entity.key not in ignored]
