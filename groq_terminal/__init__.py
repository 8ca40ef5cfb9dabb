"""Groq Terminal - a browser chat terminal streaming replies from Groq.

Combines NiceGUI for the browser page, httpx for the streaming completions
call, Pydantic for data validation, and FastAPI as the hosting app.

Components:
    - chat: Conversation store, streaming controller, completions client
    - models: Conversation and wire-format schemas
    - ui: Terminal page (credential entry and conversation view)
    - api: FastAPI app the page is mounted on
"""

__version__ = "0.1.0"
