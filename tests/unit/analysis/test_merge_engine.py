"""
Tests for the merge engine.
"""

import json

import pytest

from design_system_mcp.analysis.models import (
    AccessibilityDescriptor,
    AccessibilityKind,
    AnalysisRecord,
    AnalyzerResult,
    DiagnosticLevel,
    ExampleDescriptor,
    MergeStrategy,
    PropDescriptor,
    SlotDescriptor,
)
from design_system_mcp.analysis.merge import (
    MergeEngine,
    filter_ignored,
    merge_descriptions,
    merge_results,
    ordered_union,
)

LONG_DESCRIPTION = "A fully accessible button for triggering primary actions"


def result(analyzer, *records):
    return AnalyzerResult(analyzer=analyzer, records=list(records))


class TestMergeHelpers:
    """Test cases for field merge helpers."""

    def test_ordered_union(self):
        assert ordered_union(["a", "b"], ["b", "c", "a"]) == ["a", "b", "c"]

    @pytest.mark.parametrize(
        "existing,new,expected",
        [
            ("", "New", "New"),
            ("Old", "", "Old"),
            ("Same", "Same", "Same"),
            ("Btn", LONG_DESCRIPTION, LONG_DESCRIPTION),
            ("A button component", "A button component!", "A button component"),
        ],
    )
    def test_merge_descriptions(self, existing, new, expected):
        assert merge_descriptions(existing, new) == expected


class TestMergeEngine:
    """Test cases for MergeEngine strategies."""

    @pytest.fixture
    def engine(self):
        return MergeEngine()

    @pytest.fixture
    def tag_results(self):
        return [
            result("storybook", AnalysisRecord(name="Btn", tags=["a"])),
            result("source", AnalysisRecord(name="Btn", tags=["b"])),
        ]

    def test_append_keeps_first_record(self, engine, tag_results):
        """Test that append leaves the first record untouched."""
        outcome = engine.merge(tag_results, MergeStrategy.APPEND)

        entity = outcome.entities[0]
        assert entity.record.tags == ["a"]
        assert entity.provenance["source_data"]["tags"] == ["b"]
        assert entity.record.custom_data["source_data"]["tags"] == ["b"]
        assert entity.contributors == ["storybook", "source"]

    def test_override_replaces_record(self, engine, tag_results):
        """Test that override keeps the latest record and the previous snapshot."""
        outcome = engine.merge(tag_results, MergeStrategy.OVERRIDE)

        entity = outcome.entities[0]
        assert entity.record.tags == ["b"]
        assert entity.provenance["previous"]["tags"] == ["a"]
        assert entity.record.custom_data["previous"]["tags"] == ["a"]
        assert entity.record.custom_data["contributors"] == ["source"]
        assert entity.contributors == ["storybook", "source"]

    def test_merge_combines_fields(self, engine):
        """Test field-by-field reconciliation."""
        results = [
            result("storybook", AnalysisRecord(name="Btn", description="Btn", tags=["a"])),
            result(
                "source",
                AnalysisRecord(name="Btn", description=LONG_DESCRIPTION, tags=["b"]),
            ),
        ]

        entity = engine.merge(results, MergeStrategy.MERGE).entities[0]

        assert entity.record.description == LONG_DESCRIPTION
        assert set(entity.record.tags) == {"a", "b"}
        assert entity.record.custom_data["contributors"] == ["storybook", "source"]
        assert "source_contribution" in entity.record.custom_data

    def test_merge_keeps_first_example_per_title(self, engine):
        """Test that same-titled examples never replace existing ones."""
        results = [
            result(
                "storybook",
                AnalysisRecord(
                    name="Button",
                    examples=[
                        ExampleDescriptor("Basic", "<Button />"),
                        ExampleDescriptor("Large", "<Button size='lg' />"),
                    ],
                ),
            ),
            result(
                "comments",
                AnalysisRecord(
                    name="Button",
                    examples=[
                        ExampleDescriptor("Basic", "<Button variant='x' />"),
                        ExampleDescriptor("Icon", "<Button icon />"),
                    ],
                ),
            ),
        ]

        entity = engine.merge(results).entities[0]

        assert [e.title for e in entity.record.examples] == ["Basic", "Large", "Icon"]
        assert entity.record.examples[0].code == "<Button />"

    def test_merge_props_by_name(self, engine):
        results = [
            result(
                "source",
                AnalysisRecord(
                    name="Button",
                    props=[PropDescriptor("size", "string", False, "Size", "'md'")],
                ),
            ),
            result(
                "comments",
                AnalysisRecord(
                    name="Button",
                    props=[
                        PropDescriptor("size", "'sm' | 'md'", True),
                        PropDescriptor("label", "string", True),
                    ],
                ),
            ),
        ]

        props = engine.merge(results).entities[0].record.props

        assert [p.name for p in props] == ["size", "label"]
        assert props[0].type == "'sm' | 'md'"
        assert props[0].required is True
        assert props[0].description == "Size"
        assert props[0].default_value == "'md'"

    def test_undetermined_prop_fields_keep_existing_values(self, engine):
        results = [
            result(
                "source",
                AnalysisRecord(
                    name="Button",
                    props=[PropDescriptor("label", "string", True)],
                    slots=[SlotDescriptor("footer", required=True)],
                ),
            ),
            result(
                "manual",
                AnalysisRecord.from_dict(
                    {
                        "name": "Button",
                        "props": [{"name": "label", "description": "Better text"}],
                        "slots": [{"name": "footer"}],
                    }
                ),
            ),
        ]

        record = engine.merge(results).entities[0].record

        label = record.props[0]
        assert (label.type, label.required, label.description) == (
            "string",
            True,
            "Better text",
        )
        assert record.slots[0].required is True

    def test_merge_accessibility_by_identity(self, engine):
        note = AccessibilityDescriptor(AccessibilityKind.ARIA_LABEL, "aria-label")
        results = [
            result("source", AnalysisRecord(name="Button", accessibility_notes=[note])),
            result(
                "openai",
                AnalysisRecord(
                    name="Button",
                    accessibility_notes=[
                        AccessibilityDescriptor(
                            AccessibilityKind.ARIA_LABEL, "aria-label", "duplicate"
                        ),
                        AccessibilityDescriptor(
                            AccessibilityKind.KEYBOARD_SUPPORT, "onKeyDown"
                        ),
                    ],
                ),
            ),
        ]

        notes = engine.merge(results).entities[0].record.accessibility_notes

        assert [n.identity for n in notes] == [
            ("aria-label", "aria-label"),
            ("keyboard-support", "onKeyDown"),
        ]
        assert notes[0].description is None

    @pytest.mark.parametrize("strategy", list(MergeStrategy))
    def test_entity_key_normalization(self, engine, strategy):
        """Test that names differing in case and whitespace merge together."""
        results = [
            result("a", AnalysisRecord(name="Button")),
            result("b", AnalysisRecord(name="button")),
            result("c", AnalysisRecord(name=" Button ")),
        ]

        outcome = engine.merge(results, strategy)

        assert len(outcome.entities) == 1
        assert outcome.get("BUTTON") is outcome.entities[0]

    def test_empty_name_is_dropped_with_diagnostic(self, engine):
        results = [result("comments", AnalysisRecord(name="  "), AnalysisRecord(name="Card"))]

        outcome = engine.merge(results)

        assert [e.name for e in outcome.entities] == ["Card"]
        assert len(outcome.diagnostics) == 1
        assert outcome.diagnostics[0].level == DiagnosticLevel.WARNING
        assert outcome.diagnostics[0].source == "comments"

    def test_first_seen_order(self, engine):
        results = [
            result("a", AnalysisRecord(name="Modal"), AnalysisRecord(name="Button")),
            result("b", AnalysisRecord(name="Card"), AnalysisRecord(name="modal")),
        ]

        outcome = engine.merge(results)

        assert [e.key for e in outcome.entities] == ["modal", "button", "card"]

    @pytest.mark.parametrize("strategy", list(MergeStrategy))
    def test_merge_is_deterministic(self, strategy):
        """Test that merging the same input twice gives byte-equal output."""
        results = [
            result(
                "storybook",
                AnalysisRecord(
                    name="Button",
                    description="Btn",
                    tags=["a", "c"],
                    examples=[ExampleDescriptor("Basic", "<Button />")],
                    custom_data={"storybook": {"title": "Button"}},
                ),
            ),
            result(
                "source",
                AnalysisRecord(
                    name="button",
                    description=LONG_DESCRIPTION,
                    tags=["b"],
                    props=[PropDescriptor("label", "string", True)],
                ),
            ),
        ]

        first = merge_results(results, strategy)
        second = merge_results(results, strategy)

        dump = lambda outcome: json.dumps(
            [e.to_dict() for e in outcome.entities], sort_keys=True
        )
        assert dump(first) == dump(second)

    def test_merge_does_not_mutate_inputs(self, engine):
        first = AnalysisRecord(name="Button", tags=["a"])
        second = AnalysisRecord(name="Button", tags=["b"])

        engine.merge([result("a", first), result("b", second)])

        assert first.tags == ["a"]
        assert first.custom_data == {}
        assert second.custom_data == {}

    def test_strategy_accepts_string(self, engine, tag_results):
        outcome = engine.merge(tag_results, "override")

        assert outcome.entities[0].record.tags == ["b"]


class TestFilterIgnored:
    def test_filter_is_case_insensitive(self):
        entities = merge_results(
            [result("a", AnalysisRecord(name="Button"), AnalysisRecord(name="Card"))]
        ).entities

        remaining = filter_ignored(entities, ["button "])

        assert [e.name for e in remaining] == ["Card"]
