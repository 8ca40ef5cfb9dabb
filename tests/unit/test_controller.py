"""Unit tests for ChatController.

Uses the scripted client from tests/fakes.py in place of the network.
"""

import asyncio

import httpx
import pytest
import pytest_check as check

from groq_terminal.chat.config import ChatConfig
from groq_terminal.chat.controller import ChatController
from groq_terminal.chat.errors import EndpointError
from groq_terminal.chat.store import ConversationStore
from groq_terminal.models.schemas import ExchangeStatus, Role, Turn
from tests.fakes import ScriptedClient, wait_until


def make_controller(
    store: ConversationStore,
    client: ScriptedClient,
    config: ChatConfig | None = None,
) -> ChatController:
    return ChatController(store, client, config or ChatConfig(api_key=""))


class TestSubmitValidation:
    """Submissions that must not start an exchange."""

    async def test_missing_credential_is_rejected(self, store: ConversationStore) -> None:
        client = ScriptedClient(["never"])
        controller = make_controller(store, client)

        result = await controller.submit("hi")

        check.is_none(result)
        check.equal(store.state.turns, [])
        check.equal(client.calls, [])
        check.is_false(store.state.is_loading)

    @pytest.mark.parametrize("text", ["", "   ", "\n"])
    async def test_blank_text_is_rejected(self, keyed_store: ConversationStore, text: str) -> None:
        client = ScriptedClient(["never"])
        controller = make_controller(keyed_store, client)

        assert await controller.submit(text) is None
        assert keyed_store.state.turns == []
        assert client.calls == []


class TestCompletedExchange:
    """Happy-path streaming."""

    async def test_scenario_hi(self, keyed_store: ConversationStore) -> None:
        """Increments H, i, ! end as a single assistant turn."""
        client = ScriptedClient(["H", "i", "!"])
        controller = make_controller(keyed_store, client)

        result = await controller.submit("hi")

        check.equal(result, ExchangeStatus.COMPLETED)
        check.equal(
            keyed_store.state.turns,
            [Turn(role=Role.USER, content="hi"), Turn(role=Role.ASSISTANT, content="Hi!")],
        )
        check.is_false(keyed_store.state.is_loading)
        check.equal(controller.status, ExchangeStatus.IDLE)

    async def test_completed_exchange_adds_two_turns(self, keyed_store: ConversationStore) -> None:
        client = ScriptedClient(["one"], ["two"])
        controller = make_controller(keyed_store, client)
        await controller.submit("first")
        before = len(keyed_store.state.turns)

        await controller.submit("second")

        assert len(keyed_store.state.turns) == before + 2

    async def test_credential_is_sent(
        self, keyed_store: ConversationStore, valid_credential: str
    ) -> None:
        client = ScriptedClient(["ok"])
        controller = make_controller(keyed_store, client)

        await controller.submit("hi")

        assert client.calls[0][1] == valid_credential

    async def test_status_transitions(self, keyed_store: ConversationStore) -> None:
        gate = asyncio.Event()
        client = ScriptedClient(["a", gate, "b"])
        controller = make_controller(keyed_store, client)

        task = asyncio.ensure_future(controller.submit("hi"))
        await wait_until(lambda: keyed_store.state.turns[-1:] == [Turn(role=Role.ASSISTANT, content="a")])

        check.equal(controller.status, ExchangeStatus.STREAMING)
        check.is_true(controller.in_flight)
        check.is_true(keyed_store.state.is_loading)

        gate.set()
        check.equal(await task, ExchangeStatus.COMPLETED)
        check.equal(controller.status, ExchangeStatus.IDLE)
        check.is_false(controller.in_flight)

    async def test_store_updates_once_per_increment(self, keyed_store: ConversationStore) -> None:
        contents: list[str] = []
        keyed_store.subscribe(
            lambda state: contents.append(state.turns[-1].content)
            if state.turns and state.turns[-1].role == Role.ASSISTANT
            else None
        )
        controller = make_controller(keyed_store, ScriptedClient(["Hel", "lo"]))

        await controller.submit("greet")

        assert contents == ["", "Hel", "Hello", "Hello"]


class TestOutboundMessages:
    """Context sent to the endpoint."""

    async def test_history_in_order_with_new_text_last(self, keyed_store: ConversationStore) -> None:
        client = ScriptedClient(["Hi!"], ["Bye!"])
        controller = make_controller(keyed_store, client)

        await controller.submit("hi")
        await controller.submit("bye")

        messages = client.calls[1][0]
        assert [(m.role, m.content) for m in messages] == [
            ("user", "hi"),
            ("assistant", "Hi!"),
            ("user", "bye"),
        ]

    async def test_error_turns_replayed_as_assistant(self, keyed_store: ConversationStore) -> None:
        client = ScriptedClient([EndpointError("rate limited")], ["ok"])
        controller = make_controller(keyed_store, client)

        await controller.submit("hi")
        await controller.submit("again")

        messages = client.calls[1][0]
        assert [(m.role, m.content) for m in messages] == [
            ("user", "hi"),
            ("assistant", ""),
            ("assistant", "Error: rate limited"),
            ("user", "again"),
        ]

    async def test_error_turns_dropped_when_replay_disabled(
        self, keyed_store: ConversationStore
    ) -> None:
        client = ScriptedClient(open_error=EndpointError("down"))
        controller = make_controller(
            keyed_store, client, ChatConfig(api_key="", replay_errors_as_assistant=False)
        )
        await controller.submit("hi")

        messages = controller.build_messages("again")

        assert [(m.role, m.content) for m in messages] == [("user", "hi"), ("user", "again")]


class TestFailedExchange:
    """Failures become error turns and leave the session usable."""

    async def test_endpoint_error_payload(self, keyed_store: ConversationStore) -> None:
        client = ScriptedClient(open_error=EndpointError("rate limited", status_code=429))
        controller = make_controller(keyed_store, client)

        result = await controller.submit("hi")

        check.equal(result, ExchangeStatus.FAILED)
        check.equal(keyed_store.state.turns[-1], Turn(role=Role.ERROR, content="Error: rate limited"))
        check.equal(keyed_store.state.last_error, "rate limited")
        check.is_false(keyed_store.state.is_loading)

    async def test_mid_stream_error_keeps_partial_reply(self, keyed_store: ConversationStore) -> None:
        client = ScriptedClient(["par", httpx.ReadError("connection reset")])
        controller = make_controller(keyed_store, client)

        await controller.submit("hi")

        assert [(t.role, t.content) for t in keyed_store.state.turns] == [
            (Role.USER, "hi"),
            (Role.ASSISTANT, "par"),
            (Role.ERROR, "Error: Connection failed: connection reset"),
        ]

    async def test_unexpected_error_without_message(self, keyed_store: ConversationStore) -> None:
        client = ScriptedClient([RuntimeError()])
        controller = make_controller(keyed_store, client)

        await controller.submit("hi")

        assert keyed_store.state.turns[-1].content == "Error: An unexpected error occurred."

    async def test_session_usable_after_failure(self, keyed_store: ConversationStore) -> None:
        client = ScriptedClient([EndpointError("boom")], ["fine"])
        controller = make_controller(keyed_store, client)

        await controller.submit("hi")
        result = await controller.submit("retry")

        check.equal(result, ExchangeStatus.COMPLETED)
        check.equal(keyed_store.state.turns[-1], Turn(role=Role.ASSISTANT, content="fine"))
        check.is_none(keyed_store.state.last_error)


class TestCancellation:
    """Cancelled and superseded exchanges."""

    async def test_cancel_restores_prior_state(self, keyed_store: ConversationStore) -> None:
        client = ScriptedClient(["ok"], ["par", asyncio.Event()])
        controller = make_controller(keyed_store, client)
        await controller.submit("first")
        before_turns = list(keyed_store.state.turns)
        before_loading = keyed_store.state.is_loading

        task = asyncio.ensure_future(controller.submit("second"))
        await wait_until(lambda: keyed_store.state.turns[-1:] == [Turn(role=Role.ASSISTANT, content="par")])
        await controller.cancel()

        check.equal(await task, ExchangeStatus.CANCELLED)
        check.equal(keyed_store.state.turns, before_turns)
        check.equal(keyed_store.state.is_loading, before_loading)
        check.is_none(keyed_store.state.last_error)
        check.equal(client.open_streams, 0)

    async def test_cancel_while_sending(self, keyed_store: ConversationStore) -> None:
        """Cancelling before the first increment removes only this exchange."""
        client = ScriptedClient([asyncio.Event()])
        controller = make_controller(keyed_store, client)

        task = asyncio.ensure_future(controller.submit("hi"))
        await wait_until(lambda: controller.in_flight and len(client.calls) == 1)
        await controller.cancel()

        check.equal(await task, ExchangeStatus.CANCELLED)
        check.equal(keyed_store.state.turns, [])
        check.is_false(keyed_store.state.is_loading)

    async def test_cancel_without_exchange_is_noop(self, keyed_store: ConversationStore) -> None:
        controller = make_controller(keyed_store, ScriptedClient())

        await controller.cancel()

        assert controller.status == ExchangeStatus.IDLE

    async def test_new_submission_supersedes_previous(self, keyed_store: ConversationStore) -> None:
        """Submit hi, then bye before hi completes: only bye's turns remain."""
        client = ScriptedClient(["Hel", asyncio.Event()], ["By", "e!"])
        controller = make_controller(keyed_store, client)

        first = asyncio.ensure_future(controller.submit("hi"))
        await wait_until(lambda: keyed_store.state.turns[-1:] == [Turn(role=Role.ASSISTANT, content="Hel")])
        second = await controller.submit("bye")

        check.equal(await first, ExchangeStatus.CANCELLED)
        check.equal(second, ExchangeStatus.COMPLETED)
        check.equal(
            keyed_store.state.turns,
            [Turn(role=Role.USER, content="bye"), Turn(role=Role.ASSISTANT, content="Bye!")],
        )
        check.is_false(keyed_store.state.is_loading)

    async def test_superseding_request_excludes_cancelled_turns(
        self, keyed_store: ConversationStore
    ) -> None:
        client = ScriptedClient(["Hel", asyncio.Event()], ["ok"])
        controller = make_controller(keyed_store, client)

        first = asyncio.ensure_future(controller.submit("hi"))
        await wait_until(lambda: keyed_store.state.turns[-1:] == [Turn(role=Role.ASSISTANT, content="Hel")])
        await controller.submit("bye")
        await first

        messages = client.calls[1][0]
        assert [(m.role, m.content) for m in messages] == [("user", "bye")]

    async def test_at_most_one_exchange_in_flight(self, keyed_store: ConversationStore) -> None:
        """A burst of submissions never has two streams open at once."""
        client = ScriptedClient(["a", asyncio.Event()], ["last"])
        controller = make_controller(keyed_store, client)

        first = asyncio.ensure_future(controller.submit("msg 0"))
        await wait_until(lambda: keyed_store.state.turns[-1:] == [Turn(role=Role.ASSISTANT, content="a")])
        burst = [asyncio.ensure_future(controller.submit(f"msg {n}")) for n in range(1, 5)]
        results = await asyncio.gather(first, *burst)

        check.equal(client.max_open_streams, 1)
        check.equal(results[-1], ExchangeStatus.COMPLETED)
        check.equal(results[:-1], [ExchangeStatus.CANCELLED] * 4)
        check.equal(
            keyed_store.state.turns,
            [Turn(role=Role.USER, content="msg 4"), Turn(role=Role.ASSISTANT, content="last")],
        )
        check.is_false(keyed_store.state.is_loading)
