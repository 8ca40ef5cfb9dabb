"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - chat_config: Deterministic ChatConfig independent of the environment
    - valid_credential: An API key that passes client-side validation
    - store: Empty ConversationStore
    - keyed_store: ConversationStore already holding a credential
    - async_client: HTTPX client for API testing
"""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from groq_terminal.api import app
from groq_terminal.chat.config import ChatConfig
from groq_terminal.chat.store import ConversationStore


@pytest.fixture
def chat_config() -> ChatConfig:
    """Return a config that does not depend on environment variables.

    Returns:
        ChatConfig pointed at a dummy endpoint with default sampling.
    """
    return ChatConfig(
        api_key="",
        base_url="https://llm.test/openai/v1",
        model_name="llama3-70b-8192",
    )


@pytest.fixture
def valid_credential() -> str:
    """Return an API key with the required prefix.

    Returns:
        Syntactically valid Groq API key.
    """
    return "gsk_test_key_12345"


@pytest.fixture
def store() -> ConversationStore:
    """Return an empty conversation store."""
    return ConversationStore()


@pytest.fixture
def keyed_store(store: ConversationStore, valid_credential: str) -> ConversationStore:
    """Return a conversation store that already holds a valid credential."""
    assert store.set_credential(valid_credential)
    return store


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
