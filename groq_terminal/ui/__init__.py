"""NiceGUI interface - thin visualization layer over the conversation store.

Responsibilities:
    - Credential entry with inline validation errors
    - Conversation view with role markers and a loading indicator
    - Input form disabled while a request is in flight or input is empty

Contains no business logic. Delegates every state change to the chat
controller and re-renders from store notifications.
"""
