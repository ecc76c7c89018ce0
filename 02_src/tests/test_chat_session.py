"""Tests for ChatSession."""

import asyncio

import pytest
import pytest_asyncio

from clapp.chat import NO_CONTENT_PLACEHOLDER
from clapp.chat.session import GATEWAY_NOT_RUNNING
from clapp.errors import (
    ChatBusyError,
    CredentialSyncError,
    TransportError,
    UnknownAgentError,
    ValidationError,
)
from clapp.models import PendingRequest, Role


@pytest_asyncio.fixture
async def running(controller):
    """Put the controller into the running phase."""
    await controller.start()
    return controller


class TestChatSessionSend:
    """Tests for ChatSession.send()."""

    async def test_send_success(self, chat, running, saved_profile, gateway_process):
        """Test that a reply is appended after the user message."""
        reply = await chat.send(saved_profile.id, "Hi")

        assert reply.role is Role.AGENT
        assert reply.text == "Hello from agent"

        messages = await chat.conversation(saved_profile.id)
        assert [(m.role, m.text) for m in messages] == [
            (Role.USER, "Hi"),
            (Role.AGENT, "Hello from agent"),
        ]
        gateway_process.invoke.assert_awaited_once()

    async def test_request_params(self, chat, running, make_profile, agent_store, gateway_process):
        """Test the correlated request sent to the gateway."""
        profile = await agent_store.upsert(make_profile(system_prompt="Be brief."))

        await chat.send(profile.id, "  Hi  ")

        request = gateway_process.invoke.await_args.args[0]
        assert isinstance(request, PendingRequest)
        params = request.to_params()
        assert params["agentId"] == profile.id
        assert params["sessionKey"] == profile.id
        assert params["message"] == "Hi"
        assert params["extraSystemPrompt"] == "Be brief."
        assert params["deliver"] is False
        assert params["idempotencyKey"]

    async def test_fresh_idempotency_key_per_send(
        self, chat, running, saved_profile, gateway_process
    ):
        """Test that each send gets its own idempotency key."""
        await chat.send(saved_profile.id, "one")
        await chat.send(saved_profile.id, "two")

        keys = {c.args[0].idempotency_key for c in gateway_process.invoke.await_args_list}
        assert len(keys) == 2

    async def test_send_while_stopped(self, chat, saved_profile, gateway_process):
        """Test that a stopped gateway yields one system message and no call."""
        reply = await chat.send(saved_profile.id, "Hi")

        assert reply.role is Role.SYSTEM
        assert reply.text == GATEWAY_NOT_RUNNING
        assert await chat.conversation(saved_profile.id) == [reply]
        gateway_process.invoke.assert_not_awaited()

    async def test_transport_failure(self, chat, running, saved_profile, gateway_process):
        """Test that a failed call keeps the user message and adds an error."""
        gateway_process.invoke.side_effect = TransportError("connection refused")

        reply = await chat.send(saved_profile.id, "Hi")

        assert reply.role is Role.SYSTEM
        assert reply.text == "Error: connection refused"
        messages = await chat.conversation(saved_profile.id)
        assert [m.role for m in messages] == [Role.USER, Role.SYSTEM]

    async def test_empty_reply(self, chat, running, saved_profile, gateway_process):
        """Test the placeholder for replies without text."""
        gateway_process.invoke.return_value = "{}"
        reply = await chat.send(saved_profile.id, "Hi")
        assert reply.text == NO_CONTENT_PLACEHOLDER

    async def test_empty_text(self, chat, running, saved_profile, gateway_process):
        """Test that blank messages are rejected without side effects."""
        with pytest.raises(ValidationError) as exc_info:
            await chat.send(saved_profile.id, "   ")

        assert exc_info.value.field == "text"
        assert await chat.conversation(saved_profile.id) == []
        gateway_process.invoke.assert_not_awaited()

    async def test_unknown_agent(self, chat, running, gateway_process):
        """Test that sends to unknown agents are rejected."""
        with pytest.raises(UnknownAgentError):
            await chat.send("missing", "Hi")
        gateway_process.invoke.assert_not_awaited()

    async def test_send_is_persisted(self, chat, running, saved_profile, history_store):
        """Test that every appended message reaches history."""
        await chat.send(saved_profile.id, "Hi")
        stored = await history_store.load(saved_profile.id)
        assert [m.text for m in stored] == ["Hi", "Hello from agent"]

    async def test_timestamps_monotonic(self, chat, running, saved_profile):
        """Test that timestamps never decrease."""
        for text in ["a", "b", "c"]:
            await chat.send(saved_profile.id, text)
        stamps = [m.timestamp for m in await chat.conversation(saved_profile.id)]
        assert stamps == sorted(stamps)

    async def test_memory_bounded_by_history_limit(
        self, controller, agent_store, saved_profile, storage, gateway_process, credential_sync
    ):
        """Test that the in-memory conversation is truncated like the stored one."""
        from clapp.chat import ChatSession
        from clapp.history import HistoryStore

        await controller.start()
        session = ChatSession(
            controller=controller,
            agent_store=agent_store,
            history_store=HistoryStore(storage, limit=3),
            process=gateway_process,
            credential_sync=credential_sync,
        )
        for text in ["a", "b", "c"]:
            await session.send(saved_profile.id, text)

        messages = await session.conversation(saved_profile.id)
        assert [m.text for m in messages] == ["Hello from agent", "c", "Hello from agent"]

    async def test_loads_existing_history(self, chat, running, saved_profile, history_store):
        """Test that a new session continues the stored conversation."""
        await chat.send(saved_profile.id, "Hi")

        from clapp.chat import ChatSession

        fresh = ChatSession(
            controller=chat._controller,
            agent_store=chat._agents,
            history_store=history_store,
            process=chat._process,
            credential_sync=chat._credentials,
        )
        assert len(await fresh.conversation(saved_profile.id)) == 2


class TestChatSessionBusy:
    """Tests for the one-call-per-agent guard."""

    async def test_second_send_rejected(self, chat, running, saved_profile, gateway_process):
        """Test that a concurrent send to the same agent is refused."""
        release = asyncio.Event()

        async def slow_invoke(request):
            await release.wait()
            return '{"summary": "done"}'

        gateway_process.invoke.side_effect = slow_invoke

        first = asyncio.create_task(chat.send(saved_profile.id, "one"))
        await asyncio.sleep(0)

        with pytest.raises(ChatBusyError):
            await chat.send(saved_profile.id, "two")

        release.set()
        reply = await first
        assert reply.text == "done"
        assert gateway_process.invoke.await_count == 1

    async def test_guard_released_after_failure(
        self, chat, running, saved_profile, gateway_process
    ):
        """Test that a failed call frees the agent for the next send."""
        gateway_process.invoke.side_effect = [TransportError("down"), '{"summary": "ok"}']

        await chat.send(saved_profile.id, "one")
        reply = await chat.send(saved_profile.id, "two")
        assert reply.text == "ok"

    async def test_other_agents_not_blocked(
        self, chat, running, agent_store, make_profile, gateway_process
    ):
        """Test that the guard is per agent."""
        first = await agent_store.upsert(make_profile(name="A"))
        second = await agent_store.upsert(make_profile(name="B"))
        release = asyncio.Event()

        async def invoke(request):
            if request.agent_id == first.id:
                await release.wait()
            return '{"summary": "ok"}'

        gateway_process.invoke.side_effect = invoke

        pending = asyncio.create_task(chat.send(first.id, "one"))
        await asyncio.sleep(0)

        reply = await chat.send(second.id, "two")
        assert reply.text == "ok"

        release.set()
        await pending


class TestChatSessionAgents:
    """Tests for clear(), save_agent() and delete_agent()."""

    async def test_clear(self, chat, running, saved_profile, history_store):
        """Test that clear empties memory and storage."""
        await chat.send(saved_profile.id, "Hi")
        await chat.clear(saved_profile.id)

        assert await chat.conversation(saved_profile.id) == []
        assert await history_store.load(saved_profile.id) == []

    async def test_save_agent(self, chat, make_profile, agent_store, credential_sync):
        """Test that credentials are synced before the profile is stored."""
        profile = make_profile()
        saved = await chat.save_agent(profile)

        credential_sync.sync.assert_awaited_once_with(profile)
        assert agent_store.get(saved.id) == profile

    async def test_save_agent_sync_failure(
        self, chat, make_profile, agent_store, credential_sync
    ):
        """Test that a rejected sync leaves the store untouched."""
        credential_sync.sync.side_effect = CredentialSyncError("write failed")

        with pytest.raises(CredentialSyncError):
            await chat.save_agent(make_profile())

        assert agent_store.list() == []

    async def test_save_agent_invalid(self, chat, make_profile, credential_sync):
        """Test that invalid profiles are not synced."""
        with pytest.raises(ValidationError):
            await chat.save_agent(make_profile(name=""))
        credential_sync.sync.assert_not_awaited()

    async def test_delete_agent_purges_history(
        self, chat, running, saved_profile, agent_store, storage
    ):
        """Test that deleting a profile deletes its conversation."""
        from clapp.config import history_key

        await chat.send(saved_profile.id, "Hi")
        await chat.delete_agent(saved_profile.id)

        assert agent_store.get(saved_profile.id) is None
        assert await storage.retrieve(history_key(saved_profile.id)) is None
        assert await chat.conversation(saved_profile.id) == []
