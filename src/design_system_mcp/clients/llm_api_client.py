"""
LLM API client module for the design system MCP server.

This module provides an OpenAI-compatible chat client configured from the
environment, plus a retrying chat completion call.
"""

import os
import logging
from typing import Any, Dict, List, Optional

import openai
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..analysis.exceptions import LLMClientError

DEFAULT_CHAT_MODEL = "gpt-4o-mini"

# Errors worth retrying; authentication and request errors are not
TRANSIENT_API_ERRORS = (
    openai.APIConnectionError,
    openai.APITimeoutError,
    openai.RateLimitError,
    openai.InternalServerError,
)


def get_chat_client(timeout: Optional[float] = None):
    """
    Get a configured OpenAI client for chat/completion operations.

    Supports flexible configuration through environment variables:
    - CHAT_API_KEY: API key for chat model (falls back to OPENAI_API_KEY)
    - CHAT_API_BASE: Base URL for chat API (defaults to OpenAI)

    Args:
        timeout: Request timeout in seconds (optional)

    Returns:
        openai.OpenAI: Configured OpenAI client for chat operations

    Raises:
        LLMClientError: If no API key is configured
    """
    api_key = os.getenv("CHAT_API_KEY") or os.getenv("OPENAI_API_KEY")
    base_url = os.getenv("CHAT_API_BASE")

    if not api_key:
        raise LLMClientError(
            "No API key configured for chat model. Please set CHAT_API_KEY",
            model=get_chat_model(),
        )

    # Log configuration for debugging (without exposing API key)
    if base_url:
        logging.debug(f"Using custom chat API endpoint: {base_url}")
    else:
        logging.debug("Using default OpenAI API endpoint")

    kwargs: Dict[str, Any] = {"api_key": api_key}
    if base_url:
        kwargs["base_url"] = base_url
    if timeout is not None:
        kwargs["timeout"] = timeout
    return openai.OpenAI(**kwargs)


def get_chat_model(model_preference: Optional[str] = None) -> str:
    """Resolve the chat model: explicit preference, CHAT_MODEL, then default."""
    return model_preference or os.getenv("CHAT_MODEL") or DEFAULT_CHAT_MODEL


def validate_chat_config() -> bool:
    """
    Validate chat model configuration.

    Returns:
        bool: True if configuration is valid

    Raises:
        LLMClientError: If the API key is missing or the base URL is malformed
    """
    if not (os.getenv("CHAT_API_KEY") or os.getenv("OPENAI_API_KEY")):
        raise LLMClientError(
            "No API key configured for chat model. Please set CHAT_API_KEY",
            model=get_chat_model(),
        )

    base_url = os.getenv("CHAT_API_BASE")
    if base_url:
        from urllib.parse import urlparse

        parsed = urlparse(base_url)
        if not parsed.scheme or not parsed.netloc:
            raise LLMClientError(
                f"Invalid base URL format: {base_url}",
                details={"base_url": base_url},
            )

    if not os.getenv("CHAT_MODEL"):
        logging.warning(
            f"No chat model specified. Please set CHAT_MODEL environment variable. "
            f"Defaulting to {DEFAULT_CHAT_MODEL}."
        )

    logging.debug(
        f"Chat configuration - Model: {get_chat_model()}, "
        f"Base URL: {base_url or 'default OpenAI'}"
    )
    return True


@retry(
    retry=retry_if_exception_type(TRANSIENT_API_ERRORS),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=8),
    reraise=True,
)
def create_chat_completion(
    client,
    model: str,
    messages: List[Dict[str, Any]],
    **kwargs,
):
    """
    Create a chat completion, retrying transient API errors.

    Args:
        client: OpenAI client
        model: Model name
        messages: Conversation messages
        **kwargs: Extra completion parameters (tools, tool_choice, ...)

    Returns:
        The chat completion response
    """
    try:
        return client.chat.completions.create(model=model, messages=messages, **kwargs)
    except TRANSIENT_API_ERRORS as e:
        logging.warning(f"Transient chat API error, retrying: {e}")
        raise
