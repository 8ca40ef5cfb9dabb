"""FastAPI application factory and configuration.

Hosts the terminal page (NiceGUI is mounted onto this app in main) and a
health endpoint, with lifespan logging and CORS middleware.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from groq_terminal import __version__
from groq_terminal.chat.config import get_chat_config

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Log application startup and shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    config = get_chat_config()
    logger.info(f"Starting Groq Terminal (model={config.model_name}, endpoint={config.base_url})")
    yield
    logger.info("Shutting down Groq Terminal...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="Groq Terminal",
        description=(
            "Browser chat terminal that streams completions from Groq's "
            "OpenAI-compatible API. Conversation state lives in the browser "
            "tab's session and is never persisted."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "groq-terminal"}

    return application


app = create_app()
