"""
Built-in component analyzers.

This package provides analyzers for Storybook story files, component
sources, ``@dsm`` annotations and model-backed analysis.
"""

from .storybook_analyzer import StorybookAnalyzer
from .source_analyzer import ComponentInspector, SourceAnalyzer
from .comment_analyzer import CommentAnalyzer, find_dsm_blocks
from .openai_analyzer import OpenAIAnalyzer
from .analyzer_factory import create_default_pipeline, get_default_pipeline

__all__ = [
    "StorybookAnalyzer",
    "ComponentInspector",
    "SourceAnalyzer",
    "CommentAnalyzer",
    "find_dsm_blocks",
    "OpenAIAnalyzer",
    "create_default_pipeline",
    "get_default_pipeline",
]
