"""Agent profile module."""

from .store import AgentStore, IAgentStore, validate_profile

__all__ = ["AgentStore", "IAgentStore", "validate_profile"]
