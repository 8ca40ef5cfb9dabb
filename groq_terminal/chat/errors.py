"""Error types for the chat layer and their user-facing descriptions."""

import httpx

from groq_terminal.models.schemas import ErrorDetail

GENERIC_ERROR_MESSAGE = "An unexpected error occurred."


class ChatError(Exception):
    """Base class for failures the chat layer knows how to describe."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class CredentialError(ChatError):
    """Raised when an API key fails client-side validation."""

    pass


class MalformedResponseError(ChatError):
    """Raised when the completions stream cannot be decoded."""

    pass


class EndpointError(ChatError):
    """Raised when the completions endpoint reports an error.

    Attributes:
        message: Human-readable message, from the payload when available.
        error_type: Provider error type, e.g. "invalid_request_error".
        code: Provider error code.
        status_code: HTTP status, when the error came with one.
    """

    def __init__(
        self,
        message: str,
        error_type: str | None = None,
        code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.code = code
        self.status_code = status_code

    @classmethod
    def from_detail(cls, detail: ErrorDetail, status_code: int | None = None) -> "EndpointError":
        return cls(
            detail.message,
            error_type=detail.type,
            code=detail.code,
            status_code=status_code,
        )


class ExchangeCancelled(Exception):
    """Signals that the in-flight exchange was cancelled.

    Never shown to the user; the controller unwinds the exchange instead.
    """

    pass


def describe_error(exc: BaseException) -> str:
    """Map a failure to the message shown in the conversation.

    Prefers the structured message the endpoint sent; falls back to a
    transport description, then to the exception text, then to a generic
    message.

    Args:
        exc: The failure raised during an exchange.

    Returns:
        A non-empty, human-readable message.
    """
    if isinstance(exc, ChatError):
        return exc.message or GENERIC_ERROR_MESSAGE
    if isinstance(exc, httpx.TimeoutException):
        return "Request timed out"
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code}"
    if isinstance(exc, httpx.RequestError):
        return f"Connection failed: {exc}"
    return str(exc) or GENERIC_ERROR_MESSAGE
