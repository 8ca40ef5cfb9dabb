"""Conversation state store.

Single source of truth for the terminal page. State changes only through
the operations below; every change is pushed to subscribers so the page
can re-render.
"""

import logging
from collections.abc import Callable

from groq_terminal.chat.errors import CredentialError
from groq_terminal.models.schemas import ConversationState, Role, Turn

logger = logging.getLogger(__name__)

Listener = Callable[[ConversationState], None]


def validate_credential(text: str, prefix: str = "gsk_") -> str:
    """Check an API key syntactically.

    The key is never verified against the server here; that happens on the
    first exchange.

    Args:
        text: Key as entered by the user.
        prefix: Literal prefix the key must start with.

    Returns:
        The stripped key.

    Raises:
        CredentialError: If the key is empty or lacks the prefix.
    """
    key = text.strip()
    if not key:
        raise CredentialError("API key is required")
    if not key.startswith(prefix):
        raise CredentialError(
            f'Invalid API key format. Groq API keys should start with "{prefix}"'
        )
    return key


class ConversationStore:
    """Holds the turns, credential, loading flag, and last error of one tab."""

    def __init__(self, credential_prefix: str = "gsk_") -> None:
        self._state = ConversationState()
        self._credential_prefix = credential_prefix
        self._listeners: list[Listener] = []

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def turns(self) -> list[Turn]:
        """Snapshot of the current turns."""
        return list(self._state.turns)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener.

        Args:
            listener: Called with the state after every change.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._state)

    def set_credential(self, text: str) -> bool:
        """Validate and store an API key.

        On rejection the previously held credential is kept and only
        last_error changes.

        Returns:
            True if the key was accepted.
        """
        try:
            key = validate_credential(text, self._credential_prefix)
        except CredentialError as e:
            self._state.last_error = e.message
            self._notify()
            return False

        self._state.credential = key
        self._state.last_error = None
        self._notify()
        return True

    def clear_error(self) -> None:
        if self._state.last_error is not None:
            self._state.last_error = None
            self._notify()

    def append_user_turn(self, text: str) -> None:
        """Start an exchange with the user's text.

        Raises:
            ValueError: If text is blank or no credential is held.
        """
        if not text.strip():
            raise ValueError("Cannot append an empty user turn")
        if not self._state.credential:
            raise ValueError("Cannot append a user turn without a credential")

        self._state.turns.append(Turn(role=Role.USER, content=text))
        self._state.last_error = None
        self._state.is_loading = True
        self._notify()

    def append_assistant_placeholder(self) -> None:
        self._state.turns.append(Turn(role=Role.ASSISTANT, content=""))
        self._notify()

    def extend_last_assistant_turn(self, increment: str) -> None:
        """Append streamed text to the trailing assistant turn.

        No-op when the last turn is not an assistant turn.
        """
        turns = self._state.turns
        if not turns or turns[-1].role != Role.ASSISTANT:
            logger.debug("Dropping increment: last turn is not an assistant turn")
            return
        turns[-1].content += increment
        self._notify()

    def complete_request(self) -> None:
        self._state.is_loading = False
        self._notify()

    def abort_last_exchange(self) -> None:
        """Remove the cancelled exchange's turns and stop loading.

        Drops the trailing assistant placeholder (if it was inserted) and
        the user turn that opened the exchange.
        """
        turns = self._state.turns
        if turns and turns[-1].role == Role.ASSISTANT:
            turns.pop()
        if turns and turns[-1].role == Role.USER:
            turns.pop()
        self._state.is_loading = False
        self._notify()

    def set_error(self, message: str) -> None:
        self._state.turns.append(Turn(role=Role.ERROR, content=f"Error: {message}"))
        self._state.last_error = message
        self._state.is_loading = False
        self._notify()
