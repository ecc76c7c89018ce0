"""HistoryStore implementation."""

from typing import Protocol

from ..config import DEFAULT_HISTORY_LIMIT, history_key
from ..logging_config import get_logger
from ..models import ConversationMessage
from ..storage import IStorage

logger = get_logger(__name__)


class IHistoryStore(Protocol):
    """Bounded per-agent message logs."""

    @property
    def limit(self) -> int:
        """Maximum number of messages kept per agent."""
        ...

    async def load(self, agent_id: str) -> list[ConversationMessage]:
        """Stored log for agent_id; empty if missing or unreadable."""
        ...

    async def save(self, agent_id: str, messages: list[ConversationMessage]) -> None:
        """Persist the most recent messages, replacing the prior log."""
        ...

    async def clear(self, agent_id: str) -> None:
        """Equivalent to save(agent_id, [])."""
        ...

    async def delete(self, agent_id: str) -> None:
        """Drop the log record entirely."""
        ...


class HistoryStore:
    """Per-agent conversation logs truncated to the newest `limit` entries."""

    def __init__(self, storage: IStorage, limit: int = DEFAULT_HISTORY_LIMIT):
        if limit < 1:
            raise ValueError("history limit must be positive")
        self._storage = storage
        self._limit = limit

    @property
    def limit(self) -> int:
        return self._limit

    async def load(self, agent_id: str) -> list[ConversationMessage]:
        raw = await self._storage.retrieve(history_key(agent_id))
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning(f"History for {agent_id} is not a list, ignoring")
            return []

        messages = []
        for entry in raw:
            try:
                messages.append(ConversationMessage.from_dict(entry))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed history entry for {agent_id}: {e}")
        return messages

    async def save(self, agent_id: str, messages: list[ConversationMessage]) -> None:
        recent = messages[-self._limit:]
        await self._storage.persist(
            history_key(agent_id), [msg.to_dict() for msg in recent]
        )

    async def clear(self, agent_id: str) -> None:
        await self.save(agent_id, [])

    async def delete(self, agent_id: str) -> None:
        await self._storage.remove(history_key(agent_id))
