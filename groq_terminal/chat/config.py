"""Chat configuration with environment variable loading.

Pydantic-based configuration for the completions client and controller.
Targets Groq's OpenAI-compatible API; any compatible endpoint works via
GROQ_BASE_URL.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL = "llama3-70b-8192"


class ChatConfig(BaseModel):
    """Configuration for the streaming chat client.

    Generation parameters are applied identically to every exchange.

    Attributes:
        api_key: Optional key used to pre-fill the credential form.
        base_url: API base URL, without a trailing slash.
        model_name: Model identifier to use.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        top_p: Nucleus sampling cutoff.
        max_tokens: Maximum tokens in generated response.
        request_timeout: Transport timeout in seconds.
        credential_prefix: Literal prefix every accepted API key must carry.
        replay_errors_as_assistant: Send earlier error turns back to the
            model as assistant messages.
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("GROQ_API_KEY", ""),
        validate_default=True,
        description="API key used to pre-fill the credential form",
    )
    base_url: str = Field(
        default_factory=lambda: os.getenv("GROQ_BASE_URL") or DEFAULT_BASE_URL,
        validate_default=True,
        description="API base URL",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("GROQ_MODEL", DEFAULT_MODEL),
        description="Model to use",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    top_p: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Nucleus sampling cutoff",
    )
    max_tokens: int = Field(
        default=1024,
        ge=1,
        le=32768,
        description="Maximum tokens in generated response",
    )
    request_timeout: float = Field(
        default=120.0,
        gt=0.0,
        description="Transport timeout in seconds",
    )
    credential_prefix: str = Field(
        default="gsk_",
        min_length=1,
        description="Required literal prefix of an API key",
    )
    # Feeds earlier failures back to the model as if it had said them.
    # Possibly unintended; switch off to drop error turns from the context.
    replay_errors_as_assistant: bool = True

    @field_validator("api_key")
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        """Strip leading/trailing whitespace from the pre-filled key."""
        return v.strip()

    @field_validator("base_url")
    @classmethod
    def normalize_base_url(cls, v: str) -> str:
        """Validate the base URL and drop any trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")


def get_chat_config() -> ChatConfig:
    """Create chat configuration from environment.

    Returns:
        Configured ChatConfig instance.
    """
    return ChatConfig()
