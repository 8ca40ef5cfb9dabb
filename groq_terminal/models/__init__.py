"""Pydantic models for conversation state and the completions wire format.

Provides type safety and validation for everything that crosses the
store, controller, and HTTP boundaries.

Models:
    - Turn / Role: One conversation message and who produced it
    - ConversationState: What the terminal page renders from
    - ExchangeStatus: Lifecycle of one submission
    - OutboundMessage / CompletionRequest: Outgoing request body
    - CompletionChunk: One decoded stream event
    - ErrorResponse: Structured endpoint error payload
"""

from groq_terminal.models.schemas import (
    ChunkChoice,
    ChunkDelta,
    CompletionChunk,
    CompletionRequest,
    ConversationState,
    ErrorDetail,
    ErrorResponse,
    ExchangeStatus,
    OutboundMessage,
    Role,
    Turn,
)

__all__ = [
    "ChunkChoice",
    "ChunkDelta",
    "CompletionChunk",
    "CompletionRequest",
    "ConversationState",
    "ErrorDetail",
    "ErrorResponse",
    "ExchangeStatus",
    "OutboundMessage",
    "Role",
    "Turn",
]
