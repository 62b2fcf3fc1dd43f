"""
Extraction service.

Drives the analyzer pipeline over every story file of a design system,
merges the per-file results and reports diagnostics. Files are analyzed
concurrently on a thread pool; each run keeps its own context and results,
and output order always follows discovery order.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional

from ..analysis.exceptions import ChainAborted
from ..analysis.merge import MergeEngine, filter_ignored
from ..analysis.models import (
    AnalysisRecord,
    AnalyzerResult,
    Diagnostic,
    DiagnosticLevel,
    MergedEntity,
    PipelineContext,
)
from ..analysis.pipeline import AnalyzerPipeline
from ..analyzers.analyzer_factory import get_default_pipeline
from ..config.settings import DesignSystemConfig
from ..discovery.story_discovery import find_component_file, find_story_files
from ..output.generator import is_up_to_date

logger = logging.getLogger(__name__)

MANUAL_ANALYZER = "manual"


@dataclass
class FileExtraction:
    """Outcome of analyzing one story file."""

    story_file: str
    component_file: Optional[str] = None
    results: List[AnalyzerResult] = field(default_factory=list)
    entities: List[MergedEntity] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    skipped: bool = False
    error: Optional[str] = None


@dataclass
class ExtractionReport:
    """Merged entities and diagnostics for a whole design system."""

    entities: List[MergedEntity] = field(default_factory=list)
    results: List[AnalyzerResult] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    files: List[FileExtraction] = field(default_factory=list)
    processing_time: float = 0.0

    @property
    def files_processed(self) -> int:
        return sum(1 for f in self.files if not f.skipped and f.error is None)

    @property
    def files_skipped(self) -> int:
        return sum(1 for f in self.files if f.skipped)

    @property
    def files_failed(self) -> int:
        return sum(1 for f in self.files if f.error is not None)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.level == DiagnosticLevel.ERROR]


class ExtractionService:
    """Runs analyzers over story files and merges their output."""

    def __init__(
        self,
        config: DesignSystemConfig,
        pipeline: AnalyzerPipeline = None,
        merge_engine: MergeEngine = None,
    ):
        """
        Initialize extraction service.

        Args:
            config: Design system configuration
            pipeline: Analyzer pipeline (default pipeline if None)
            merge_engine: Merge engine (new engine if None)
        """
        self.config = config
        self.pipeline = pipeline or get_default_pipeline()
        self.merge_engine = merge_engine or MergeEngine()
        self.logger = logging.getLogger(__name__)

    def build_context(self, story_file: str) -> PipelineContext:
        return PipelineContext(
            story_file_path=story_file,
            component_file_path=find_component_file(story_file),
            framework=self.config.storybook.framework.value,
            design_library=self.config.design_library.value,
            base_import_path=self.config.base_import_path,
        )

    def analyze_file(self, story_file: str) -> FileExtraction:
        """
        Run the analyzer chain on one story file and merge its results.

        Args:
            story_file: Absolute path of the story file

        Returns:
            FileExtraction

        Raises:
            ChainAborted: If an analyzer fails and continue_on_error is off
        """
        context = self.build_context(story_file)
        chain = self.config.chain

        results = self.pipeline.execute(context, chain)
        outcome = self.merge_engine.merge(results, chain.merge_strategy)

        diagnostics = [d for r in results for d in r.diagnostics]
        diagnostics.extend(outcome.diagnostics)

        return FileExtraction(
            story_file=story_file,
            component_file=context.component_file_path,
            results=results,
            entities=filter_ignored(outcome.entities, self.config.ignore_components),
            diagnostics=diagnostics,
        )

    def _analyze_safely(self, story_file: str, skip_up_to_date: bool) -> FileExtraction:
        if skip_up_to_date and is_up_to_date(story_file, self.config):
            self.logger.debug(f"Skipping {story_file} (already up-to-date)")
            return FileExtraction(story_file=story_file, skipped=True)

        try:
            return self.analyze_file(story_file)
        except ChainAborted:
            raise
        except Exception as e:
            self.logger.error(f"Failed to analyze {story_file}: {e}")
            return FileExtraction(
                story_file=story_file,
                error=str(e),
                diagnostics=[
                    Diagnostic(
                        level=DiagnosticLevel.ERROR,
                        message=f"Failed to analyze {story_file}: {e}",
                        source=story_file,
                    )
                ],
            )

    def manual_result(self) -> Optional[AnalyzerResult]:
        """Records declared in the configuration, as a pseudo-analyzer result."""
        if not self.config.manual_components:
            return None
        records = [AnalysisRecord.from_dict(c) for c in self.config.manual_components]
        return AnalyzerResult(analyzer=MANUAL_ANALYZER, records=records)

    def extract(
        self,
        story_files: Optional[List[str]] = None,
        skip_up_to_date: bool = False,
    ) -> ExtractionReport:
        """
        Analyze story files and merge everything into one entity set.

        Args:
            story_files: Files to analyze (discovered from config if None)
            skip_up_to_date: Skip stories whose inline context file is newer

        Returns:
            ExtractionReport

        Raises:
            ChainAborted: If an analyzer fails and continue_on_error is off
        """
        start = time.perf_counter()
        if story_files is None:
            story_files = find_story_files(self.config)

        workers = max(1, min(self.config.max_workers, len(story_files) or 1))
        self.logger.info(f"Analyzing {len(story_files)} story file(s) with {workers} worker(s)")

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._analyze_safely, story_file, skip_up_to_date)
                for story_file in story_files
            ]
            files: List[FileExtraction] = []
            try:
                for future in futures:
                    files.append(future.result())
            except ChainAborted:
                for future in futures:
                    future.cancel()
                raise

        results = [r for f in files for r in f.results]
        manual = self.manual_result()
        if manual is not None:
            results.append(manual)

        outcome = self.merge_engine.merge(results, self.config.chain.merge_strategy)
        diagnostics = [d for f in files for d in f.diagnostics]
        diagnostics.extend(outcome.diagnostics)

        report = ExtractionReport(
            entities=filter_ignored(outcome.entities, self.config.ignore_components),
            results=results,
            diagnostics=diagnostics,
            files=files,
            processing_time=time.perf_counter() - start,
        )
        self.logger.info(
            f"Extracted {len(report.entities)} component(s): "
            f"{report.files_processed} processed, {report.files_skipped} skipped, "
            f"{report.files_failed} failed in {report.processing_time:.2f}s"
        )
        return report
