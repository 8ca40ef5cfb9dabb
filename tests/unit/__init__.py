"""Unit tests for individual components in isolation.

Ensures fast execution with no network access.

Coverage:
    - config: ChatConfig defaults, ranges, and environment loading
    - store: Conversation operations, credential validation, notifications
    - cancellation: Racing awaits and iteration against a token
    - client: Request payload, SSE decoding, error payloads
    - controller: Exchange lifecycle, cancellation, supersession
    - terminal_page: Presentation helpers

Uses the scripted client from tests/fakes.py and httpx.MockTransport in
place of the endpoint. Leverages pytest-check for multiple assertions per test.
"""
