from enum import Enum

from pydantic import BaseModel, Field, field_validator


class Role(str, Enum):
    """Roles a conversation turn can carry."""

    USER = "user"
    ASSISTANT = "assistant"
    ERROR = "error"


class ExchangeStatus(str, Enum):
    """Lifecycle of a single submission through to its outcome."""

    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class Turn(BaseModel):
    """One message in the conversation.

    Attributes:
        role: Who produced the turn (user, assistant, or error).
        content: The turn text. Grows while an assistant reply streams in.
    """

    role: Role
    content: str = ""


class ConversationState(BaseModel):
    """Everything the terminal page renders from.

    Attributes:
        turns: Ordered conversation turns.
        is_loading: Whether an exchange is in flight.
        credential: The accepted API key, empty until one is entered.
        last_error: Most recent error message, if any.
    """

    turns: list[Turn] = Field(default_factory=list)
    is_loading: bool = False
    credential: str = ""
    last_error: str | None = None


class OutboundMessage(BaseModel):
    """A message in the form the completions endpoint accepts."""

    role: str = Field(..., description="Message role: 'user', 'assistant', or 'system'")
    content: str = Field(..., description="The message content")


class CompletionRequest(BaseModel):
    """Request body for a streaming chat completion.

    Attributes:
        model: Provider model identifier.
        messages: Conversation context, oldest first, new user text last.
        temperature: Sampling temperature.
        max_tokens: Upper bound on generated tokens.
        top_p: Nucleus sampling cutoff.
        stream: Always true; the client only consumes streamed replies.
        stop: No explicit stop sequence is sent.
    """

    model: str
    messages: list[OutboundMessage] = Field(..., min_length=1)
    temperature: float
    max_tokens: int
    top_p: float
    stream: bool = True
    stop: str | list[str] | None = None


class ErrorDetail(BaseModel):
    """Structured error returned by the endpoint."""

    message: str
    type: str | None = None
    code: str | None = None

    @field_validator("code", mode="before")
    @classmethod
    def stringify_code(cls, v: object) -> object:
        """Some providers send numeric codes."""
        if isinstance(v, int):
            return str(v)
        return v


class ErrorResponse(BaseModel):
    """Error payload shape: {"error": {"message", "type", "code"}}."""

    error: ErrorDetail


class ChunkDelta(BaseModel):
    role: str | None = None
    content: str | None = None


class ChunkChoice(BaseModel):
    index: int = 0
    delta: ChunkDelta = Field(default_factory=ChunkDelta)
    finish_reason: str | None = None


class CompletionChunk(BaseModel):
    """One decoded server-sent event from the completions stream.

    Attributes:
        choices: Candidate deltas; only the first one is rendered.
        error: Present when the provider aborts the stream with an error.
    """

    choices: list[ChunkChoice] = Field(default_factory=list)
    error: ErrorDetail | None = None

    @property
    def text(self) -> str:
        """Content increment carried by the first choice, or an empty string."""
        if not self.choices:
            return ""
        return self.choices[0].delta.content or ""
