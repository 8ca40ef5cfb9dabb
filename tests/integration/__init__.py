"""Integration tests for components working together as a system.

Coverage:
    - FastAPI host app with real ASGI requests
    - Controller, store, and httpx client together over a mocked transport
    - A live exchange against Groq (when configured)

Requires GROQ_API_KEY for the live endpoint test.
"""
