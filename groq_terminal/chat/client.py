"""Streaming client for the OpenAI-compatible chat completions endpoint.

Opens one streamed POST per exchange and turns the server-sent events into
plain text increments. Error payloads, whether sent as an HTTP error body
or as an event in the middle of the stream, surface as EndpointError.
"""

import json
import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

import httpx
from pydantic import ValidationError

from groq_terminal.chat.config import ChatConfig, get_chat_config
from groq_terminal.chat.errors import EndpointError, MalformedResponseError
from groq_terminal.models.schemas import (
    CompletionChunk,
    CompletionRequest,
    ErrorResponse,
    OutboundMessage,
)

logger = logging.getLogger(__name__)

COMPLETIONS_PATH = "/chat/completions"
DONE_SENTINEL = "[DONE]"


def parse_event_line(line: str) -> str | None:
    """Extract the data field from one server-sent event line.

    Returns:
        The payload text, or None for blank lines, comments, and
        non-data fields.
    """
    if not line.startswith("data:"):
        return None
    return line[5:].strip()


def error_from_body(status_code: int, body: bytes) -> EndpointError:
    """Build an EndpointError from an HTTP error response body.

    Uses the structured error message when the body is an error payload,
    otherwise falls back to the bare status code.
    """
    try:
        payload = ErrorResponse.model_validate_json(body)
    except ValidationError:
        return EndpointError(f"HTTP {status_code}", status_code=status_code)
    return EndpointError.from_detail(payload.error, status_code=status_code)


class CompletionClient:
    """Client for streamed chat completions.

    Generation parameters come from ChatConfig and are applied to every
    request. An httpx transport can be supplied to route requests
    elsewhere (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        config: ChatConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or get_chat_config()
        self._transport = transport

    @property
    def config(self) -> ChatConfig:
        return self._config

    def build_payload(self, messages: list[OutboundMessage]) -> dict:
        """Build the JSON request body for a streamed completion.

        Args:
            messages: Conversation context with the new user text last.

        Returns:
            Request body ready to send.
        """
        request = CompletionRequest(
            model=self._config.model_name,
            messages=messages,
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
            top_p=self._config.top_p,
        )
        return request.model_dump(mode="json")

    @asynccontextmanager
    async def open_stream(
        self,
        messages: list[OutboundMessage],
        credential: str,
    ) -> AsyncGenerator[AsyncIterator[str]]:
        """Issue the completions request and expose its text increments.

        The response stays open for the lifetime of the context; leaving it
        closes the connection, which stops any further data.

        Args:
            messages: Conversation context with the new user text last.
            credential: Bearer API key.

        Yields:
            Lazy, single-use iterator of non-empty text increments.

        Raises:
            EndpointError: If the endpoint answers with an error status.
            httpx.RequestError: On transport failure.
        """
        payload = self.build_payload(messages)
        logger.debug(
            f"Opening completion stream: model={payload['model']} messages={len(messages)}"
        )
        async with (
            httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=self._config.request_timeout,
                transport=self._transport,
            ) as client,
            client.stream(
                "POST",
                COMPLETIONS_PATH,
                json=payload,
                headers={
                    "Authorization": f"Bearer {credential}",
                    "Accept": "text/event-stream",
                },
            ) as response,
        ):
            if response.status_code >= 400:
                body = await response.aread()
                logger.warning(f"Completion request failed with HTTP {response.status_code}")
                raise error_from_body(response.status_code, body)

            increments = self._iter_increments(response)
            try:
                yield increments
            finally:
                await increments.aclose()

    async def _iter_increments(self, response: httpx.Response) -> AsyncGenerator[str]:
        """Decode SSE lines into text increments until [DONE] or stream end."""
        async for line in response.aiter_lines():
            data = parse_event_line(line)
            if not data:
                continue
            if data == DONE_SENTINEL:
                return

            try:
                chunk = CompletionChunk.model_validate(json.loads(data))
            except (json.JSONDecodeError, ValidationError) as e:
                raise MalformedResponseError(
                    "Malformed response from completions endpoint"
                ) from e

            if chunk.error is not None:
                raise EndpointError.from_detail(chunk.error)
            if chunk.text:
                yield chunk.text
