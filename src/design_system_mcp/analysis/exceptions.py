"""
Custom exceptions for component analysis operations.

This module defines a hierarchy of exceptions that provide specific error
handling for the different failure points of the analysis pipeline.
"""

from typing import Any, Dict


class DesignSystemError(Exception):
    """Base exception for all design system analysis errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class AnalyzerError(DesignSystemError):
    """Raised when an analyzer cannot produce a result."""

    def __init__(self, message: str, analyzer: str = None, details: dict = None):
        super().__init__(message, details)
        self.analyzer = analyzer


class AnalyzerCapabilityMismatch(AnalyzerError):
    """Raised when an analyzer is invoked on a context it cannot handle."""

    pass


class AnalyzerExecutionFailure(AnalyzerError):
    """Raised when an analyzer fails while running."""

    def __init__(
        self,
        message: str,
        analyzer: str = None,
        cause: BaseException = None,
        details: dict = None,
    ):
        super().__init__(message, analyzer, details)
        self.cause = cause


class ChainAborted(DesignSystemError):
    """Raised when a failing analyzer stops the whole chain."""

    def __init__(
        self,
        message: str,
        analyzer: str = None,
        failure: AnalyzerExecutionFailure = None,
    ):
        super().__init__(message)
        self.analyzer = analyzer
        self.failure = failure


class ConfigurationError(DesignSystemError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_key: str = None, config_value: str = None):
        super().__init__(message)
        self.config_key = config_key
        self.config_value = config_value


class DiscoveryError(DesignSystemError):
    """Raised when story file discovery fails."""

    def __init__(self, message: str, root_directory: str = None, details: dict = None):
        super().__init__(message, details)
        self.root_directory = root_directory


class LLMClientError(DesignSystemError):
    """Raised when the chat completion API cannot be used."""

    def __init__(self, message: str, model: str = None, details: dict = None):
        super().__init__(message, details)
        self.model = model


def categorize_exception(exception: Exception) -> str:
    """
    Categorize an exception for error reporting.

    Args:
        exception: Exception to categorize

    Returns:
        Category string
    """
    if isinstance(exception, ChainAborted):
        return "chain_aborted"
    elif isinstance(exception, AnalyzerCapabilityMismatch):
        return "capability_mismatch"
    elif isinstance(exception, AnalyzerExecutionFailure):
        return "analyzer_failure"
    elif isinstance(exception, ConfigurationError):
        return "configuration"
    elif isinstance(exception, DiscoveryError):
        return "discovery"
    elif isinstance(exception, LLMClientError):
        return "llm_client"
    elif isinstance(exception, (OSError, IOError)):
        return "file_system"
    elif isinstance(exception, (ValueError, TypeError)):
        return "validation"
    else:
        return "unknown"


def format_error_details(exception: Exception) -> Dict[str, Any]:
    """
    Format exception details for logging and error reporting.

    Args:
        exception: Exception to format

    Returns:
        Dictionary with formatted error details
    """
    details = {
        "type": type(exception).__name__,
        "message": str(exception),
        "category": categorize_exception(exception),
    }

    if isinstance(exception, DesignSystemError):
        details.update(exception.details)

        for attr in ["analyzer", "config_key", "config_value", "root_directory", "model"]:
            value = getattr(exception, attr, None)
            if value is not None:
                details[attr] = value

    cause = getattr(exception, "cause", None)
    if cause is not None:
        details["cause"] = f"{type(cause).__name__}: {cause}"

    return details
