"""ChatSession: correlated chat turns against the gateway."""

from datetime import datetime, timezone
from typing import Protocol

from ..agents import IAgentStore, validate_profile
from ..credentials import ICredentialSync
from ..errors import ChatBusyError, UnknownAgentError, ValidationError
from ..gateway import IGatewayController, IGatewayProcess
from ..history import IHistoryStore
from ..logging_config import get_logger
from ..models import (
    AgentProfile,
    ConversationMessage,
    GatewayPhase,
    PendingRequest,
    Role,
)
from .replies import extract_reply_text

logger = get_logger(__name__)

GATEWAY_NOT_RUNNING = "Gateway is not running. Start it and try again."


class IChatSession(Protocol):
    """Owner of every agent's in-memory conversation."""

    async def conversation(self, agent_id: str) -> list[ConversationMessage]:
        """Current conversation for an agent, loaded from history on first use."""
        ...

    async def send(self, agent_id: str, text: str) -> ConversationMessage:
        """Send one user turn; returns the agent or system reply."""
        ...

    async def clear(self, agent_id: str) -> None:
        """Drop an agent's conversation, in memory and persisted."""
        ...

    async def save_agent(self, profile: AgentProfile) -> AgentProfile:
        """Validate, sync credentials, then store a profile."""
        ...

    async def delete_agent(self, agent_id: str) -> None:
        """Delete a profile together with its history."""
        ...


class ChatSession:
    """Runs chat turns and coordinates profile saves and deletes.

    One call per agent may be outstanding at a time; a second send() for the
    same agent raises ChatBusyError instead of interleaving replies.
    """

    def __init__(
        self,
        controller: IGatewayController,
        agent_store: IAgentStore,
        history_store: IHistoryStore,
        process: IGatewayProcess,
        credential_sync: ICredentialSync,
    ):
        self._controller = controller
        self._agents = agent_store
        self._history = history_store
        self._process = process
        self._credentials = credential_sync

        self._conversations: dict[str, list[ConversationMessage]] = {}
        self._in_flight: set[str] = set()

    async def conversation(self, agent_id: str) -> list[ConversationMessage]:
        return list(await self._messages(agent_id))

    async def _messages(self, agent_id: str) -> list[ConversationMessage]:
        if agent_id not in self._conversations:
            self._conversations[agent_id] = await self._history.load(agent_id)
        return self._conversations[agent_id]

    async def _append(
        self, agent_id: str, role: Role, text: str
    ) -> ConversationMessage:
        """Append and persist; timestamps never go backwards."""
        messages = await self._messages(agent_id)

        now = datetime.now(timezone.utc)
        if messages and messages[-1].timestamp > now:
            now = messages[-1].timestamp

        message = ConversationMessage(role=role, text=text, timestamp=now)
        messages.append(message)
        await self._history.save(agent_id, messages)
        # Keep memory in step with the truncated persisted log
        del messages[: -self._history.limit]
        return message

    async def send(self, agent_id: str, text: str) -> ConversationMessage:
        text = text.strip()
        if not text:
            raise ValidationError("text", "Message must not be empty")

        profile = self._agents.get(agent_id)
        if profile is None:
            raise UnknownAgentError(agent_id)

        if agent_id in self._in_flight:
            raise ChatBusyError(agent_id)

        if self._controller.state.phase is not GatewayPhase.RUNNING:
            logger.info(f"Send to {agent_id} refused: gateway not running")
            return await self._append(agent_id, Role.SYSTEM, GATEWAY_NOT_RUNNING)

        self._in_flight.add(agent_id)
        try:
            request = PendingRequest.for_agent(agent_id, text, profile.system_prompt)
            await self._append(agent_id, Role.USER, text)

            logger.info(
                "Gateway call",
                extra={
                    "context": {
                        "agent_id": agent_id,
                        "idempotency_key": request.idempotency_key,
                    }
                },
            )

            try:
                raw = await self._process.invoke(request)
            except Exception as e:
                logger.error(f"Gateway call for {agent_id} failed: {e}")
                return await self._append(agent_id, Role.SYSTEM, f"Error: {e}")

            return await self._append(agent_id, Role.AGENT, extract_reply_text(raw))
        finally:
            self._in_flight.discard(agent_id)

    async def clear(self, agent_id: str) -> None:
        self._conversations[agent_id] = []
        await self._history.clear(agent_id)

    async def save_agent(self, profile: AgentProfile) -> AgentProfile:
        validate_profile(profile)
        await self._credentials.sync(profile)
        return await self._agents.upsert(profile)

    async def delete_agent(self, agent_id: str) -> None:
        await self._agents.delete(agent_id)
        self._conversations.pop(agent_id, None)
        await self._history.delete(agent_id)
        logger.info(f"Removed agent {agent_id} and its history")
