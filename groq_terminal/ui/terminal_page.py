"""NiceGUI terminal page: credential entry and streamed conversation."""

import logging
from collections.abc import Callable

from nicegui import Client, ui

from groq_terminal.chat.client import CompletionClient
from groq_terminal.chat.config import get_chat_config
from groq_terminal.chat.controller import ChatController
from groq_terminal.chat.store import ConversationStore
from groq_terminal.models.schemas import ConversationState, Role, Turn

logger = logging.getLogger(__name__)

TURN_MARKERS = {
    Role.USER: ">",
    Role.ASSISTANT: "#",
    Role.ERROR: "!",
}

LOADING_TEXT = "Processing..."

CUSTOM_CSS = """
<style>
    body { background: #000; min-height: 100vh; }

    .terminal, .terminal * {
        font-family: 'Menlo', 'Monaco', 'Consolas', monospace;
    }

    .terminal { color: #4ade80; }

    .terminal-panel {
        background: #111827;
        border-radius: 8px;
    }

    .turn-content {
        white-space: pre-wrap;
        word-break: break-word;
    }

    .turn-error { color: #f87171; }

    .pulse { animation: pulse 1.5s infinite ease-in-out; }

    @keyframes pulse {
        0%, 100% { opacity: 1; }
        50% { opacity: 0.4; }
    }
</style>
"""


def turn_marker(role: Role) -> str:
    """Prompt-style marker shown in front of a turn."""
    return TURN_MARKERS[role]


def can_send(state: ConversationState, text: str) -> bool:
    """The send button is enabled only when idle and the input has text."""
    return not state.is_loading and bool(text.strip())


async def submit_when_ready(
    store: ConversationStore,
    controller: ChatController,
    text: str,
    on_accept: Callable[[], None],
) -> bool:
    """Submit the input unless the form is disabled.

    Applies the same gate as the send button, so the Enter key cannot
    submit while a request is in flight.

    Args:
        store: Store the gate reads from.
        controller: Controller that runs the exchange.
        text: Current input text.
        on_accept: Called before the exchange starts, e.g. to clear the input.

    Returns:
        True if an exchange was started.
    """
    if not can_send(store.state, text):
        return False
    on_accept()
    await controller.submit(text)
    return True


def bind_session_cleanup(
    client: Client,
    controller: ChatController,
    unsubscribe: Callable[[], None],
) -> None:
    """Tear the session down once the page's client is deleted.

    Deletion happens after the reconnect timeout; a temporary websocket drop
    keeps the listener and any in-flight exchange alive.
    """

    async def cleanup() -> None:
        unsubscribe()
        await controller.cancel()

    client.on_delete(cleanup)


def render_turn(turn: Turn) -> None:
    is_error = turn.role == Role.ERROR
    color = "turn-error" if is_error else ""
    with ui.row().classes("w-full items-start gap-2 no-wrap"):
        ui.label(turn_marker(turn.role)).classes(color)
        ui.label(turn.content).classes(f"flex-1 turn-content {color}")


@ui.page("/")
def terminal_page() -> None:
    """Main terminal page. Each browser tab gets its own conversation."""
    ui.add_head_html(CUSTOM_CSS)
    ui.query("body").classes("terminal")

    config = get_chat_config()
    store = ConversationStore(credential_prefix=config.credential_prefix)
    controller = ChatController(store, CompletionClient(config), config)

    if config.api_key:
        store.set_credential(config.api_key)

    input_field: ui.input | None = None
    send_btn: ui.button | None = None
    scroll: ui.scroll_area | None = None
    has_credential = bool(store.state.credential)

    def update_send_button() -> None:
        if send_btn is not None and input_field is not None:
            send_btn.set_enabled(can_send(store.state, input_field.value or ""))

    @ui.refreshable
    def credential_error() -> None:
        if store.state.last_error:
            with ui.row().classes("items-center gap-2 turn-error mb-2"):
                ui.icon("error_outline")
                ui.label(store.state.last_error)

    @ui.refreshable
    def turns_view() -> None:
        for turn in store.state.turns:
            render_turn(turn)
        if store.state.is_loading:
            with ui.row().classes("items-center gap-2"):
                ui.label(turn_marker(Role.ASSISTANT))
                ui.label(LOADING_TEXT).classes("pulse")

    def submit_credential(value: str | None) -> None:
        if store.set_credential(value or ""):
            logger.info("API key accepted")

    async def send_message() -> None:
        if input_field is None:
            return
        field = input_field

        def clear_input() -> None:
            field.value = ""
            update_send_button()

        await submit_when_ready(store, controller, field.value or "", clear_input)

    def render_credential_view() -> None:
        with ui.column().classes("w-full terminal-panel p-4 gap-2"):
            with ui.row().classes("items-center gap-2"):
                ui.icon("key")
                ui.label("Enter your Groq API key to continue:")
            credential_error()
            key_input = (
                ui.input(
                    placeholder=f"{config.credential_prefix}xxxxxx",
                    password=True,
                    on_change=lambda _: store.clear_error(),
                )
                .props("dark outlined dense color=green")
                .classes("w-full")
            )
            key_input.on("blur", lambda: submit_credential(key_input.value))
            key_input.on("keydown.enter", lambda: submit_credential(key_input.value))

    def render_conversation_view() -> None:
        nonlocal input_field, send_btn, scroll
        with (
            ui.scroll_area()
            .classes("w-full terminal-panel")
            .style("height: calc(100vh - 200px)") as scroll,
            ui.column().classes("w-full p-4 gap-4"),
        ):
            turns_view()

        with ui.row().classes("w-full gap-2 items-center no-wrap"):
            input_field = (
                ui.input(
                    placeholder="Type your message...",
                    on_change=lambda _: update_send_button(),
                )
                .props("dark outlined dense color=green")
                .classes("flex-grow")
                .on("keydown.enter", send_message)
            )
            send_btn = ui.button("Send", icon="send", on_click=send_message).props(
                "unelevated color=green text-color=black"
            )
        update_send_button()

    @ui.refreshable
    def body() -> None:
        nonlocal input_field, send_btn, scroll
        input_field = send_btn = scroll = None
        if store.state.credential:
            render_conversation_view()
        else:
            render_credential_view()

    def on_state_change(state: ConversationState) -> None:
        nonlocal has_credential
        if bool(state.credential) != has_credential:
            has_credential = bool(state.credential)
            body.refresh()
            return
        if not state.credential:
            credential_error.refresh()
            return
        turns_view.refresh()
        update_send_button()
        if scroll is not None:
            scroll.scroll_to(percent=1.0)

    unsubscribe = store.subscribe(on_state_change)
    bind_session_cleanup(ui.context.client, controller, unsubscribe)

    # === UI Layout ===
    with ui.column().classes("w-full max-w-3xl mx-auto p-4 gap-4"):
        with ui.row().classes("items-center gap-2"):
            ui.icon("terminal").classes("text-2xl")
            ui.label("Groq Terminal").classes("text-xl")
        body()
