"""Core data models for Clapp."""

from .agents import (
    DEFAULT_SYSTEM_PROMPT,
    PROVIDERS,
    AgentProfile,
    Provider,
    ProviderSpec,
    is_valid_agent_id,
    new_agent_id,
)
from .gateway import GatewayPhase, GatewayState, PendingRequest
from .messages import ConversationMessage, Role

__all__ = [
    # Agents
    "AgentProfile",
    "Provider",
    "ProviderSpec",
    "PROVIDERS",
    "DEFAULT_SYSTEM_PROMPT",
    "new_agent_id",
    "is_valid_agent_id",
    # Messages
    "ConversationMessage",
    "Role",
    # Gateway
    "GatewayPhase",
    "GatewayState",
    "PendingRequest",
]
