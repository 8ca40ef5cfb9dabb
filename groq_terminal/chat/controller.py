"""Streaming request controller.

Drives one exchange at a time: validate, send, stream increments into the
store, then complete, unwind, or record the failure.

Exchange lifecycle:
    IDLE -> SENDING -> STREAMING -> COMPLETED | CANCELLED | FAILED -> IDLE

A new submission cancels the in-flight exchange and waits for its unwind
to settle before it touches the store, so there is only ever one writer.
"""

import asyncio
import logging
from contextlib import AsyncExitStack
from typing import Protocol

from groq_terminal.chat.cancellation import CancellationToken
from groq_terminal.chat.client import CompletionClient
from groq_terminal.chat.config import ChatConfig
from groq_terminal.chat.errors import ExchangeCancelled, describe_error
from groq_terminal.chat.store import ConversationStore
from groq_terminal.models.schemas import ExchangeStatus, OutboundMessage, Role

logger = logging.getLogger(__name__)


class StreamingClient(Protocol):
    """What the controller needs from a completions client."""

    def open_stream(self, messages: list[OutboundMessage], credential: str):
        ...


class Exchange:
    """Bookkeeping for one submission."""

    def __init__(self) -> None:
        self.token = CancellationToken()
        self.status = ExchangeStatus.SENDING
        self.settled = asyncio.Event()


class ChatController:
    """Owns at most one in-flight exchange against the completions endpoint."""

    def __init__(
        self,
        store: ConversationStore,
        client: StreamingClient | None = None,
        config: ChatConfig | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            store: Conversation store this controller writes to.
            client: Completions client. Built from config if not provided.
            config: Optional chat configuration. Taken from the client when
                    it has one, otherwise loaded from environment.
        """
        self._store = store
        if client is None:
            client = CompletionClient(config)
        self._client = client
        self._config = config or getattr(client, "config", None) or ChatConfig()
        self._exchange: Exchange | None = None

    @property
    def status(self) -> ExchangeStatus:
        """Status of the in-flight exchange, IDLE when there is none."""
        if self._exchange is None:
            return ExchangeStatus.IDLE
        return self._exchange.status

    @property
    def in_flight(self) -> bool:
        return self._exchange is not None

    def build_messages(self, text: str) -> list[OutboundMessage]:
        """Map stored turns to endpoint roles and append the new user text.

        Error turns are replayed as assistant messages unless
        replay_errors_as_assistant is switched off, in which case they are
        left out of the context.
        """
        messages: list[OutboundMessage] = []
        for turn in self._store.turns:
            if turn.role == Role.ERROR:
                if not self._config.replay_errors_as_assistant:
                    continue
                role = Role.ASSISTANT.value
            else:
                role = turn.role.value
            messages.append(OutboundMessage(role=role, content=turn.content))
        messages.append(OutboundMessage(role=Role.USER.value, content=text))
        return messages

    async def cancel(self) -> None:
        """Cancel the in-flight exchange, if any, and wait until it settles."""
        exchange = self._exchange
        if exchange is None:
            return
        exchange.token.cancel()
        await exchange.settled.wait()

    async def submit(self, text: str) -> ExchangeStatus | None:
        """Run one exchange for the user's text.

        Args:
            text: The user's message.

        Returns:
            Terminal status of the exchange, or None when the submission
            was rejected (blank text or no credential) without side effects.
        """
        if not text.strip():
            logger.debug("Ignoring blank submission")
            return None
        if not self._store.state.credential:
            logger.warning("Submission rejected: no API key set")
            return None

        # Loop: another submission may claim the slot while we wait.
        while self._exchange is not None:
            await self.cancel()

        exchange = Exchange()
        self._exchange = exchange
        try:
            await self._run(exchange, text)
        finally:
            exchange.settled.set()
            if self._exchange is exchange:
                self._exchange = None
        return exchange.status

    async def _run(self, exchange: Exchange, text: str) -> None:
        credential = self._store.state.credential
        messages = self.build_messages(text)
        self._store.append_user_turn(text)
        logger.info(f"Exchange started with {len(messages)} messages")

        try:
            async with AsyncExitStack() as stack:
                increments = await exchange.token.run(
                    stack.enter_async_context(self._client.open_stream(messages, credential))
                )
                self._store.append_assistant_placeholder()
                exchange.status = ExchangeStatus.STREAMING

                async for increment in exchange.token.iterate(increments):
                    self._store.extend_last_assistant_turn(increment)

        except ExchangeCancelled:
            exchange.status = ExchangeStatus.CANCELLED
            self._store.abort_last_exchange()
            logger.info("Exchange cancelled")
        except Exception as e:
            message = describe_error(e)
            exchange.status = ExchangeStatus.FAILED
            self._store.set_error(message)
            logger.warning(f"Exchange failed: {message}")
        else:
            exchange.status = ExchangeStatus.COMPLETED
            self._store.complete_request()
            logger.info("Exchange completed")
