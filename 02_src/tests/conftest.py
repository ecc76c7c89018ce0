"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

REPLY_HELLO = '{"result": {"payloads": [{"text": "Hello from agent"}]}}'


@pytest_asyncio.fixture
async def storage():
    """Create in-memory storage for testing."""
    from clapp.storage import Storage

    st = Storage(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest.fixture
def gateway_process():
    """Create mock gateway process primitives."""
    process = Mock()
    process.start = AsyncMock(return_value=None)
    process.stop = AsyncMock(return_value=None)
    process.status = AsyncMock(return_value="stopped")
    process.invoke = AsyncMock(return_value=REPLY_HELLO)
    return process


@pytest.fixture
def credential_sync():
    """Create mock credential sync that always succeeds."""
    sync = Mock()
    sync.sync = AsyncMock(return_value=None)
    return sync


@pytest_asyncio.fixture
async def agent_store(storage):
    """Create loaded AgentStore."""
    from clapp.agents import AgentStore

    store = AgentStore(storage)
    await store.load()
    return store


@pytest.fixture
def history_store(storage):
    """Create HistoryStore with the default limit."""
    from clapp.history import HistoryStore

    return HistoryStore(storage)


@pytest.fixture
def controller(gateway_process):
    """Create GatewayController over the mock process."""
    from clapp.gateway import GatewayController

    return GatewayController(gateway_process)


@pytest.fixture
def chat(controller, agent_store, history_store, gateway_process, credential_sync):
    """Create ChatSession wired to the mock collaborators."""
    from clapp.chat import ChatSession

    return ChatSession(
        controller=controller,
        agent_store=agent_store,
        history_store=history_store,
        process=gateway_process,
        credential_sync=credential_sync,
    )


@pytest.fixture
def make_profile():
    """Factory for valid agent profiles."""
    from clapp.models import AgentProfile, Provider

    def _make(**overrides):
        fields = {
            "name": "Helper",
            "provider": Provider.ANTHROPIC,
            "api_key": "sk-ant-test",
        }
        fields.update(overrides)
        return AgentProfile(**fields)

    return _make


@pytest_asyncio.fixture
async def saved_profile(agent_store, make_profile):
    """A profile already present in the store."""
    return await agent_store.upsert(make_profile())
