"""
Tests for the analyzer pipeline.
"""

import pytest
from unittest.mock import Mock

from design_system_mcp.analysis.exceptions import (
    AnalyzerCapabilityMismatch,
    AnalyzerExecutionFailure,
    ChainAborted,
    ConfigurationError,
)
from design_system_mcp.analysis.interfaces import BaseAnalyzer
from design_system_mcp.analysis.models import (
    AnalysisRecord,
    ChainConfig,
    DiagnosticLevel,
    MergeStrategy,
    PipelineContext,
    StageConfig,
)
from design_system_mcp.analysis.pipeline import AnalyzerPipeline


class RecordingAnalyzer(BaseAnalyzer):
    """Analyzer that records the contexts it sees."""

    def __init__(self, name, handles=True, error=None, record_name="Button"):
        super().__init__(name=name)
        self.handles = handles
        self.error = error
        self.record_name = record_name
        self.seen_contexts = []

    def get_config_schema(self):
        return {"flag": {"type": "boolean", "description": "Test flag", "default": False}}

    def can_handle(self, context):
        return self.handles

    def _run_impl(self, context):
        self.seen_contexts.append(context)
        if self.error is not None:
            raise self.error
        return self.create_result([AnalysisRecord(name=self.record_name)])


def chain(*stages, continue_on_error=True):
    return ChainConfig(
        stages=[StageConfig(name=n, weight=w, enabled=e) for n, w, e in stages],
        merge_strategy=MergeStrategy.MERGE,
        continue_on_error=continue_on_error,
    )


class TestAnalyzerPipeline:
    """Test cases for AnalyzerPipeline."""

    @pytest.fixture
    def context(self):
        return PipelineContext(story_file_path="/ds/Button.stories.tsx")

    @pytest.fixture
    def pipeline(self):
        pipeline = AnalyzerPipeline()
        pipeline.register(RecordingAnalyzer("a"))
        pipeline.register(RecordingAnalyzer("b"))
        pipeline.register(RecordingAnalyzer("c"))
        return pipeline

    def test_register_duplicate_identifier_raises(self, pipeline):
        """Test that registering the same identifier twice fails."""
        with pytest.raises(ConfigurationError) as exc_info:
            pipeline.register(RecordingAnalyzer("a"))

        assert exc_info.value.config_value == "a"

    def test_available_analyzers_in_registration_order(self, pipeline):
        assert pipeline.available_analyzers() == ["a", "b", "c"]

    def test_unregister(self, pipeline):
        pipeline.unregister("b")

        assert pipeline.get_analyzer("b") is None
        assert pipeline.available_analyzers() == ["a", "c"]

    def test_executes_in_weight_order(self, pipeline, context):
        """Test that stages run by ascending weight, not declaration order."""
        results = pipeline.execute(context, chain(("c", 3, True), ("a", 1, True), ("b", 2, True)))

        assert [r.analyzer for r in results] == ["a", "b", "c"]

    def test_equal_weights_keep_declaration_order(self, pipeline, context):
        results = pipeline.execute(context, chain(("c", 1, True), ("a", 1, True), ("b", 0, True)))

        assert [r.analyzer for r in results] == ["b", "c", "a"]

    def test_disabled_and_unregistered_stages_are_skipped(self, pipeline, context):
        results = pipeline.execute(
            context, chain(("a", 0, True), ("b", 1, False), ("missing", 2, True))
        )

        assert [r.analyzer for r in results] == ["a"]

    def test_can_handle_false_never_runs(self, context):
        """Test that an analyzer that cannot handle the context is never run."""
        pipeline = AnalyzerPipeline()
        skipped = RecordingAnalyzer("skipped", handles=False)
        skipped.run = Mock()
        pipeline.register(skipped)
        pipeline.register(RecordingAnalyzer("ran"))

        results = pipeline.execute(context, chain(("skipped", 0, True), ("ran", 1, True)))

        skipped.run.assert_not_called()
        assert [r.analyzer for r in results] == ["ran"]
        assert results[0].diagnostics == []

    def test_previous_results_snapshot(self, pipeline, context):
        """Test that each analyzer sees only the results produced before it."""
        pipeline.execute(context, chain(("a", 0, True), ("b", 1, True), ("c", 2, True)))

        seen_b = pipeline.get_analyzer("b").seen_contexts[0]
        seen_c = pipeline.get_analyzer("c").seen_contexts[0]
        assert [r.analyzer for r in seen_b.previous_results] == ["a"]
        assert [r.analyzer for r in seen_c.previous_results] == ["a", "b"]
        assert isinstance(seen_c.previous_results, tuple)
        assert context.previous_results == ()

    def test_stage_config_is_passed_as_context_config(self, context):
        pipeline = AnalyzerPipeline()
        analyzer = RecordingAnalyzer("a")
        pipeline.register(analyzer)
        config = ChainConfig(stages=[StageConfig(name="a", config={"flag": True})])

        pipeline.execute(context, config)

        seen = analyzer.seen_contexts[0]
        assert seen.config["flag"] is True
        with pytest.raises(TypeError):
            seen.config["flag"] = False

    def test_continue_on_error_isolates_failure(self, context):
        """Test that one failing analyzer does not stop the other two."""
        pipeline = AnalyzerPipeline()
        pipeline.register(RecordingAnalyzer("a"))
        pipeline.register(RecordingAnalyzer("b", error=RuntimeError("boom")))
        pipeline.register(RecordingAnalyzer("c"))

        results = pipeline.execute(
            context, chain(("a", 0, True), ("b", 1, True), ("c", 2, True))
        )

        assert [r.analyzer for r in results] == ["a", "c"]
        diagnostics = results[0].diagnostics
        assert len(diagnostics) == 1
        assert diagnostics[0].level == DiagnosticLevel.ERROR
        assert diagnostics[0].source == "b"
        assert "boom" in diagnostics[0].message

    def test_first_analyzer_failure_attaches_to_next_result(self, context):
        """Test that a failure before any result is reported on the next result."""
        pipeline = AnalyzerPipeline()
        pipeline.register(RecordingAnalyzer("a", error=RuntimeError("boom")))
        pipeline.register(RecordingAnalyzer("b"))
        pipeline.register(RecordingAnalyzer("c"))

        results = pipeline.execute(
            context, chain(("a", 0, True), ("b", 1, True), ("c", 2, True))
        )

        assert [r.analyzer for r in results] == ["b", "c"]
        diagnostics = results[0].diagnostics
        assert len(diagnostics) == 1
        assert diagnostics[0].level == DiagnosticLevel.ERROR
        assert diagnostics[0].source == "a"
        assert "boom" in diagnostics[0].message
        assert results[1].diagnostics == []

    def test_failure_without_any_result(self, context):
        pipeline = AnalyzerPipeline()
        pipeline.register(RecordingAnalyzer("a", error=RuntimeError("boom")))

        assert pipeline.execute(context, chain(("a", 0, True))) == []

    def test_abort_on_error_raises_chain_aborted(self, context):
        """Test that a failure aborts the chain when continue_on_error is off."""
        pipeline = AnalyzerPipeline()
        pipeline.register(RecordingAnalyzer("a"))
        pipeline.register(RecordingAnalyzer("b", error=RuntimeError("boom")))
        pipeline.register(RecordingAnalyzer("c"))

        with pytest.raises(ChainAborted) as exc_info:
            pipeline.execute(
                context,
                chain(("a", 0, True), ("b", 1, True), ("c", 2, True), continue_on_error=False),
            )

        error = exc_info.value
        assert error.analyzer == "b"
        assert isinstance(error.failure, AnalyzerExecutionFailure)
        assert isinstance(error.failure.cause, RuntimeError)
        assert pipeline.get_analyzer("c").seen_contexts == []

    def test_default_chain_config(self, pipeline):
        config = pipeline.default_chain_config(MergeStrategy.APPEND, continue_on_error=False)

        assert [s.name for s in config.stages] == ["a", "b", "c"]
        assert config.stages[0].config == {"flag": False}
        assert config.merge_strategy == MergeStrategy.APPEND
        assert config.continue_on_error is False


class TestBaseAnalyzer:
    """Test cases for BaseAnalyzer plumbing."""

    def test_run_adds_execution_time(self):
        result = RecordingAnalyzer("a").run(PipelineContext(story_file_path="x"))

        assert result.analyzer == "a"
        assert "executionTime" in result.metadata

    def test_analyze_raises_capability_mismatch(self):
        analyzer = RecordingAnalyzer("a", handles=False)

        with pytest.raises(AnalyzerCapabilityMismatch):
            analyzer.analyze(PipelineContext(story_file_path="x"))

    def test_analyze_wraps_unexpected_errors(self):
        analyzer = RecordingAnalyzer("a", error=KeyError("missing"))

        with pytest.raises(AnalyzerExecutionFailure) as exc_info:
            analyzer.analyze(PipelineContext(story_file_path="x"))

        assert exc_info.value.analyzer == "a"
        assert isinstance(exc_info.value.cause, KeyError)

    def test_option_falls_back_to_schema_default(self):
        analyzer = RecordingAnalyzer("a")

        assert analyzer.option(PipelineContext(), "flag") is False
        assert analyzer.option(PipelineContext(config={"flag": True}), "flag") is True
        assert analyzer.option(PipelineContext(), "unknown") is None

    def test_read_file_content_missing_file(self, tmp_path):
        analyzer = RecordingAnalyzer("a")

        with pytest.raises(AnalyzerExecutionFailure):
            analyzer.read_file_content(str(tmp_path / "missing.tsx"))
