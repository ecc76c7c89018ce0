"""Clapp gateway session core."""

from .agents import AgentStore, IAgentStore
from .app import Application, IApplication
from .chat import ChatSession, IChatSession
from .credentials import CredentialSync, ICredentialSync
from .gateway import (
    GatewayController,
    IGatewayController,
    IGatewayProcess,
    IStatusPoller,
    OpenClawProcess,
    StatusPoller,
)
from .history import HistoryStore, IHistoryStore
from .models import (
    AgentProfile,
    ConversationMessage,
    GatewayPhase,
    GatewayState,
    PendingRequest,
    Provider,
    Role,
)
from .storage import IStorage, Storage

__all__ = [
    # Application
    "Application",
    "IApplication",
    # Models
    "AgentProfile",
    "Provider",
    "ConversationMessage",
    "Role",
    "GatewayPhase",
    "GatewayState",
    "PendingRequest",
    # Components
    "IStorage",
    "Storage",
    "IAgentStore",
    "AgentStore",
    "IHistoryStore",
    "HistoryStore",
    "ICredentialSync",
    "CredentialSync",
    "IGatewayProcess",
    "OpenClawProcess",
    "IGatewayController",
    "GatewayController",
    "IStatusPoller",
    "StatusPoller",
    "IChatSession",
    "ChatSession",
]
