"""Chat generation helpers for Molt Hotel agents."""

from .chat import FALLBACK_LINES, ChatGenerator, ChatLine, build_chat_messages, clean_generated_text
from .providers import (
    ProviderError,
    ProviderExecutionError,
    ProviderExecutionResult,
    ProviderUnavailableError,
    chat_provider_config,
    execute_chat_completion,
)

__all__ = [
    "FALLBACK_LINES",
    "ChatGenerator",
    "ChatLine",
    "build_chat_messages",
    "clean_generated_text",
    "ProviderError",
    "ProviderExecutionError",
    "ProviderExecutionResult",
    "ProviderUnavailableError",
    "chat_provider_config",
    "execute_chat_completion",
]
