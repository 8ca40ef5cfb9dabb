"""Conversation state and streaming logic.

Responsibilities:
    - Conversation state store with change notification
    - Client-side credential validation
    - Streaming completions over httpx with SSE decoding
    - One-exchange-at-a-time controller with cooperative cancellation
    - Mapping failures to human-readable error turns

Contains no presentation code; the UI layer subscribes to the store.
"""

from groq_terminal.chat.cancellation import CancellationToken
from groq_terminal.chat.client import CompletionClient
from groq_terminal.chat.config import ChatConfig, get_chat_config
from groq_terminal.chat.controller import ChatController
from groq_terminal.chat.errors import (
    ChatError,
    CredentialError,
    EndpointError,
    ExchangeCancelled,
    MalformedResponseError,
    describe_error,
)
from groq_terminal.chat.store import ConversationStore, validate_credential

__all__ = [
    "CancellationToken",
    "ChatConfig",
    "ChatController",
    "ChatError",
    "CompletionClient",
    "ConversationStore",
    "CredentialError",
    "EndpointError",
    "ExchangeCancelled",
    "MalformedResponseError",
    "describe_error",
    "get_chat_config",
    "validate_credential",
]
