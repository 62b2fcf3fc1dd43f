"""
Analyzer pipeline.

This module runs the declared, weight-ordered, enabled subset of the
registered analyzers over one context, isolating per-analyzer failures.
"""

import dataclasses
import logging
import time
from typing import Dict, List, Optional

from .exceptions import (
    AnalyzerExecutionFailure,
    ChainAborted,
    ConfigurationError,
)
from .interfaces import BaseAnalyzer, IAnalyzer
from .models import (
    AnalyzerResult,
    ChainConfig,
    Diagnostic,
    DiagnosticLevel,
    MergeStrategy,
    PipelineContext,
    StageConfig,
)

logger = logging.getLogger(__name__)

# Execution order used when no chain is declared
DEFAULT_ANALYZER_WEIGHTS: Dict[str, int] = {
    "comments": 0,
    "storybook": 1,
    "source": 2,
    "openai": 3,
}


class AnalyzerPipeline:
    """Registry and orchestrator for analyzers."""

    def __init__(self):
        """Initialize an empty pipeline."""
        self._analyzers: Dict[str, IAnalyzer] = {}
        self.logger = logging.getLogger(__name__)

    def register(self, analyzer: IAnalyzer) -> None:
        """
        Register an analyzer instance.

        Args:
            analyzer: Analyzer to register

        Raises:
            ConfigurationError: If the identifier is already registered
        """
        identifier = analyzer.identifier
        if identifier in self._analyzers:
            raise ConfigurationError(
                f"Analyzer '{identifier}' is already registered",
                config_key="analyzer_registry",
                config_value=identifier,
            )

        self._analyzers[identifier] = analyzer
        self.logger.debug(f"Registered analyzer: {identifier}")

    def unregister(self, identifier: str) -> None:
        if identifier in self._analyzers:
            del self._analyzers[identifier]
        self.logger.debug(f"Unregistered analyzer: {identifier}")

    def get_analyzer(self, identifier: str) -> Optional[IAnalyzer]:
        return self._analyzers.get(identifier)

    def available_analyzers(self) -> List[str]:
        """List registered analyzer identifiers in registration order."""
        return list(self._analyzers.keys())

    def default_chain_config(
        self,
        merge_strategy: MergeStrategy = MergeStrategy.MERGE,
        continue_on_error: bool = True,
    ) -> ChainConfig:
        """
        Build a chain covering every registered analyzer.

        Args:
            merge_strategy: Merge strategy for the chain
            continue_on_error: Whether failures are isolated

        Returns:
            ChainConfig with default weights and option payloads
        """
        stages = []
        for identifier, analyzer in self._analyzers.items():
            options = (
                analyzer.get_default_options()
                if isinstance(analyzer, BaseAnalyzer)
                else {}
            )
            stages.append(
                StageConfig(
                    name=identifier,
                    enabled=True,
                    weight=DEFAULT_ANALYZER_WEIGHTS.get(identifier, 2),
                    config=options,
                )
            )
        return ChainConfig(
            stages=stages,
            merge_strategy=merge_strategy,
            continue_on_error=continue_on_error,
        )

    def _select_stages(self, chain_config: ChainConfig) -> List[StageConfig]:
        selected = []
        for stage in chain_config.stages:
            if not stage.enabled:
                continue
            if stage.name not in self._analyzers:
                self.logger.debug(f"Analyzer '{stage.name}' is not registered, skipping")
                continue
            selected.append(stage)
        # sorted() is stable, so equal weights keep declaration order
        return sorted(selected, key=lambda s: s.weight)

    def execute(
        self, context: PipelineContext, chain_config: ChainConfig
    ) -> List[AnalyzerResult]:
        """
        Run the enabled analyzers of a chain in weight order.

        Each analyzer sees a snapshot of the results produced before it and
        its own stage payload as ``context.config``.

        Args:
            context: Base context for the run
            chain_config: Declared chain

        Returns:
            Results in execution order, with failure diagnostics attached

        Raises:
            ChainAborted: If an analyzer fails and continue_on_error is False
        """
        results: List[AnalyzerResult] = []
        # Failures seen before any result exists wait for the next result
        pending: List[Diagnostic] = []

        for stage in self._select_stages(chain_config):
            analyzer = self._analyzers[stage.name]

            if not analyzer.can_handle(context):
                self.logger.debug(
                    f"Skipping analyzer {stage.name}: cannot handle "
                    f"{context.story_file_path}"
                )
                continue

            stage_context = dataclasses.replace(
                context, previous_results=tuple(results), config=stage.config
            )

            self.logger.debug(f"Running analyzer {stage.name} on {context.story_file_path}")
            start = time.perf_counter()
            try:
                result = analyzer.run(stage_context)
            except Exception as e:
                diagnostic = Diagnostic(
                    level=DiagnosticLevel.ERROR,
                    message=f"Analyzer {stage.name} failed: {e}",
                    source=stage.name,
                )
                self.logger.error(diagnostic.message)

                if not chain_config.continue_on_error:
                    failure = AnalyzerExecutionFailure(
                        diagnostic.message, analyzer=stage.name, cause=e
                    )
                    raise ChainAborted(
                        f"Analyzer chain aborted: {diagnostic.message}",
                        analyzer=stage.name,
                        failure=failure,
                    ) from failure

                if results:
                    results[-1].diagnostics.append(diagnostic)
                else:
                    pending.append(diagnostic)
                continue

            if pending:
                result.diagnostics[:0] = pending
                pending = []
            results.append(result)
            self.logger.debug(
                f"Analyzer {stage.name} produced {len(result.records)} record(s) "
                f"in {time.perf_counter() - start:.3f}s"
            )

        for diagnostic in pending:
            self.logger.warning(
                f"Dropping diagnostic from {diagnostic.source}: the run produced no results"
            )
        return results
