# External service client adapters

from .llm_api_client import (
    create_chat_completion,
    get_chat_client,
    get_chat_model,
    validate_chat_config,
)

__all__ = [
    "create_chat_completion",
    "get_chat_client",
    "get_chat_model",
    "validate_chat_config",
]
