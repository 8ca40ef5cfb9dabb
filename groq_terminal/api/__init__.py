"""FastAPI host for the terminal page.

Endpoints:
    - GET /health: Service health status
    - GET /: Terminal page (NiceGUI, mounted at startup)
"""

from groq_terminal.api.app import app, create_app

__all__ = ["app", "create_app"]
