"""
Analyzer interface and base implementation.

This module defines the abstract contract every analyzer implements and a
base class providing the plumbing shared by the built-in analyzers.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from .exceptions import (
    AnalyzerCapabilityMismatch,
    AnalyzerError,
    AnalyzerExecutionFailure,
)
from .models import AnalysisRecord, AnalyzerResult, Diagnostic, PipelineContext


class IAnalyzer(ABC):
    """Interface for component analyzers."""

    @property
    @abstractmethod
    def identifier(self) -> str:
        """Stable, unique analyzer name used in chain configuration."""
        pass

    @abstractmethod
    def can_handle(self, context: PipelineContext) -> bool:
        """
        Check if the analyzer applies to a context.

        Must be a pure predicate with no side effects.

        Args:
            context: Pipeline context for the current run

        Returns:
            True if the analyzer can run on this context
        """
        pass

    @abstractmethod
    def run(self, context: PipelineContext) -> AnalyzerResult:
        """
        Analyze the subject described by the context.

        Implementations must not mutate the context or any result in
        ``context.previous_results``.

        Args:
            context: Pipeline context for the current run

        Returns:
            AnalyzerResult with the extracted records

        Raises:
            Exception: Any failure; the pipeline isolates it
        """
        pass


class BaseAnalyzer(IAnalyzer):
    """Base implementation for analyzers with common functionality."""

    def __init__(self, name: str, description: str = ""):
        """
        Initialize base analyzer.

        Args:
            name: Analyzer identifier
            description: Human readable summary of what the analyzer extracts
        """
        self.name = name
        self.description = description
        self.logger = logging.getLogger(__name__)

    @property
    def identifier(self) -> str:
        return self.name

    def get_config_schema(self) -> Dict[str, Dict[str, Any]]:
        """
        Describe the options accepted in the stage config payload.

        Returns:
            Mapping of option name to ``{"type", "description", "default"}``
        """
        return {}

    def get_default_options(self) -> Dict[str, Any]:
        """Default stage payload derived from the config schema."""
        return {
            key: spec.get("default")
            for key, spec in self.get_config_schema().items()
            if "default" in spec
        }

    def option(self, context: PipelineContext, key: str) -> Any:
        """Read an option from the stage payload, falling back to its default."""
        if key in context.config:
            return context.config[key]
        return self.get_config_schema().get(key, {}).get("default")

    def run(self, context: PipelineContext) -> AnalyzerResult:
        """Run the analyzer and stamp timing metadata on its result."""
        start = time.perf_counter()
        result = self._run_impl(context)
        result.metadata.setdefault(
            "executionTime", round((time.perf_counter() - start) * 1000, 3)
        )
        return result

    def analyze(self, context: PipelineContext) -> AnalyzerResult:
        """
        Run the analyzer with capability checking and error wrapping.

        This is the entry point for callers outside the pipeline; the
        pipeline itself checks ``can_handle`` and skips silently.

        Args:
            context: Pipeline context

        Returns:
            AnalyzerResult

        Raises:
            AnalyzerCapabilityMismatch: If the analyzer cannot handle the context
            AnalyzerExecutionFailure: If the analyzer fails unexpectedly
        """
        if not self.can_handle(context):
            raise AnalyzerCapabilityMismatch(
                f"Analyzer {self.name} cannot handle story "
                f"{context.story_file_path!r}",
                analyzer=self.name,
            )

        try:
            return self.run(context)
        except AnalyzerError:
            raise
        except Exception as e:
            raise AnalyzerExecutionFailure(
                f"Unexpected error in analyzer {self.name}: {e}",
                analyzer=self.name,
                cause=e,
            ) from e

    @abstractmethod
    def _run_impl(self, context: PipelineContext) -> AnalyzerResult:
        """
        Actual analysis implementation.

        Args:
            context: Pipeline context

        Returns:
            AnalyzerResult
        """
        pass

    def create_result(
        self,
        records: List[AnalysisRecord],
        diagnostics: List[Diagnostic] = None,
        **metadata,
    ) -> AnalyzerResult:
        """
        Create an AnalyzerResult stamped with this analyzer's identifier.

        Args:
            records: Extracted records
            diagnostics: Diagnostics raised while extracting
            **metadata: Additional result metadata

        Returns:
            AnalyzerResult instance
        """
        return AnalyzerResult(
            analyzer=self.name,
            records=records,
            metadata=dict(metadata),
            diagnostics=list(diagnostics or []),
        )

    def read_file_content(self, file_path: str, encoding: str = "utf-8") -> str:
        """
        Read a source file.

        Args:
            file_path: Path to the file
            encoding: File encoding

        Returns:
            File content as string

        Raises:
            AnalyzerExecutionFailure: If the file cannot be read
        """
        try:
            with open(file_path, "r", encoding=encoding, errors="ignore") as f:
                return f.read()
        except (OSError, IOError, UnicodeError) as e:
            raise AnalyzerExecutionFailure(
                f"Cannot read file {file_path}: {e}",
                analyzer=self.name,
                cause=e,
            ) from e
