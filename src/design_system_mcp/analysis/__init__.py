"""
Component analysis core.

This package provides the analysis data model, the analyzer contract, the
analyzer pipeline and the merge engine that reconciles analyzer output.
"""

from .models import (
    AccessibilityDescriptor,
    AccessibilityKind,
    AnalysisRecord,
    AnalyzerResult,
    ChainConfig,
    Diagnostic,
    DiagnosticLevel,
    ExampleDescriptor,
    MergedEntity,
    MergeOutcome,
    MergeStrategy,
    PipelineContext,
    PropDescriptor,
    SlotDescriptor,
    StageConfig,
)
from .exceptions import (
    AnalyzerCapabilityMismatch,
    AnalyzerError,
    AnalyzerExecutionFailure,
    ChainAborted,
    ConfigurationError,
    DesignSystemError,
)
from .interfaces import IAnalyzer, BaseAnalyzer
from .pipeline import AnalyzerPipeline
from .merge import MergeEngine, merge_results, filter_ignored

__all__ = [
    "AccessibilityDescriptor",
    "AccessibilityKind",
    "AnalysisRecord",
    "AnalyzerResult",
    "ChainConfig",
    "Diagnostic",
    "DiagnosticLevel",
    "ExampleDescriptor",
    "MergedEntity",
    "MergeOutcome",
    "MergeStrategy",
    "PipelineContext",
    "PropDescriptor",
    "SlotDescriptor",
    "StageConfig",
    "AnalyzerCapabilityMismatch",
    "AnalyzerError",
    "AnalyzerExecutionFailure",
    "ChainAborted",
    "ConfigurationError",
    "DesignSystemError",
    "IAnalyzer",
    "BaseAnalyzer",
    "AnalyzerPipeline",
    "MergeEngine",
    "merge_results",
    "filter_ignored",
]
