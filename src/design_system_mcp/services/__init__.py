"""
Services layer for the design system MCP application.

This module contains the extraction service that orchestrates discovery,
the analyzer pipeline and merging.
"""

from .extraction_service import ExtractionReport, ExtractionService, FileExtraction

__all__ = ["ExtractionReport", "ExtractionService", "FileExtraction"]
