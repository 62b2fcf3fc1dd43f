"""
Analyzer factory.

Builds pipelines with the built-in analyzers registered.
"""

import logging
from typing import Optional

from ..analysis.pipeline import AnalyzerPipeline
from .comment_analyzer import CommentAnalyzer
from .openai_analyzer import OpenAIAnalyzer
from .source_analyzer import ComponentInspector, SourceAnalyzer
from .storybook_analyzer import StorybookAnalyzer

logger = logging.getLogger(__name__)


def create_default_pipeline() -> AnalyzerPipeline:
    """Create a pipeline with every built-in analyzer registered."""
    inspector = ComponentInspector()
    pipeline = AnalyzerPipeline()

    pipeline.register(CommentAnalyzer())
    pipeline.register(StorybookAnalyzer())
    pipeline.register(SourceAnalyzer(inspector))
    pipeline.register(OpenAIAnalyzer(inspector=inspector))

    logger.debug(f"Default pipeline analyzers: {pipeline.available_analyzers()}")
    return pipeline


# Global pipeline instance for convenience
_default_pipeline: Optional[AnalyzerPipeline] = None


def get_default_pipeline() -> AnalyzerPipeline:
    """Get the shared default pipeline; analyzers hold no per-run state."""
    global _default_pipeline
    if _default_pipeline is None:
        _default_pipeline = create_default_pipeline()
    return _default_pipeline
