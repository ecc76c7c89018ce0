"""Gateway lifecycle and request data models."""

import uuid
from dataclasses import dataclass, field
from enum import Enum


class GatewayPhase(str, Enum):
    """Observed lifecycle phase of the supervised gateway process."""

    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    ERROR = "error"


@dataclass(frozen=True)
class GatewayState:
    """Immutable snapshot; replaced wholesale on every transition."""

    phase: GatewayPhase = GatewayPhase.STOPPED
    last_error: str | None = None

    def __post_init__(self):
        if self.phase is GatewayPhase.ERROR and not self.last_error:
            raise ValueError("error state requires a detail")
        if self.phase is not GatewayPhase.ERROR and self.last_error is not None:
            raise ValueError("last_error is only valid in the error phase")

    @classmethod
    def failed(cls, detail: str) -> "GatewayState":
        return cls(GatewayPhase.ERROR, detail)

    def to_dict(self) -> dict:
        return {"phase": self.phase.value, "lastError": self.last_error}


def new_idempotency_key() -> str:
    return uuid.uuid4().hex


@dataclass
class PendingRequest:
    """One correlated chat call to the gateway (never persisted)."""

    agent_id: str
    message: str
    system_prompt: str
    session_key: str
    idempotency_key: str = field(default_factory=new_idempotency_key)

    @classmethod
    def for_agent(cls, agent_id: str, message: str, system_prompt: str) -> "PendingRequest":
        """Session key equals the agent id: one persistent thread per agent."""
        return cls(
            agent_id=agent_id,
            message=message,
            system_prompt=system_prompt,
            session_key=agent_id,
        )

    def to_params(self) -> dict:
        """Params for the gateway 'agent' method."""
        return {
            "agentId": self.agent_id,
            "message": self.message,
            "sessionKey": self.session_key,
            "idempotencyKey": self.idempotency_key,
            "extraSystemPrompt": self.system_prompt,
            "deliver": False,
        }
