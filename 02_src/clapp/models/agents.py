"""Agent profile data models."""

import re
import uuid
from dataclasses import dataclass, field
from enum import Enum

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."

# Ids become directory names under the runtime state dir
AGENT_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+")
# Runtime fallback agent, written on every sync
RESERVED_AGENT_IDS = frozenset({"main"})


class Provider(str, Enum):
    """Model providers an agent profile can target."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GROQ = "groq"
    TOGETHER = "together"
    OLLAMA = "ollama"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ProviderSpec:
    """What a provider needs from a profile."""

    requires_key: bool
    accepts_base_url: bool = False
    requires_base_url: bool = False
    default_base_url: str | None = None
    models: tuple[str, ...] = ()  # empty -> free-form model entry
    env_var: str | None = None  # where the gateway process looks for the key


PROVIDERS: dict[Provider, ProviderSpec] = {
    Provider.ANTHROPIC: ProviderSpec(
        requires_key=True,
        env_var="ANTHROPIC_API_KEY",
        models=(
            "claude-sonnet-4-5-20250929",
            "claude-haiku-4-5-20251001",
            "claude-opus-4-1-20250805",
        ),
    ),
    Provider.OPENAI: ProviderSpec(
        requires_key=True,
        env_var="OPENAI_API_KEY",
        models=("gpt-4o", "gpt-4o-mini", "gpt-4.1"),
    ),
    Provider.GROQ: ProviderSpec(
        requires_key=True,
        env_var="GROQ_API_KEY",
        models=("llama-3.3-70b-versatile", "llama-3.1-8b-instant"),
    ),
    Provider.TOGETHER: ProviderSpec(
        requires_key=True,
        env_var="TOGETHER_API_KEY",
        models=(
            "meta-llama/Llama-3.3-70B-Instruct-Turbo",
            "Qwen/Qwen2.5-72B-Instruct-Turbo",
        ),
    ),
    Provider.OLLAMA: ProviderSpec(
        requires_key=False,
        accepts_base_url=True,
        default_base_url="http://127.0.0.1:11434",
    ),
    Provider.CUSTOM: ProviderSpec(
        requires_key=True,
        accepts_base_url=True,
        requires_base_url=True,
    ),
}


def new_agent_id() -> str:
    """Generate a fresh, never-reused profile id."""
    return uuid.uuid4().hex


def is_valid_agent_id(agent_id: object) -> bool:
    """Plain token usable as a directory name and not reserved."""
    return (
        isinstance(agent_id, str)
        and AGENT_ID_PATTERN.fullmatch(agent_id) is not None
        and agent_id not in RESERVED_AGENT_IDS
    )


@dataclass
class AgentProfile:
    """A named configuration a user can chat against."""

    name: str
    provider: Provider
    api_key: str = ""
    model: str = ""
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    base_url: str | None = None
    brave_key: str | None = None  # enables web search
    id: str = field(default_factory=new_agent_id)

    @property
    def spec(self) -> ProviderSpec:
        return PROVIDERS[self.provider]

    @property
    def resolved_model(self) -> str:
        """Configured model, or the provider's first listed model."""
        if self.model.strip():
            return self.model.strip()
        return self.spec.models[0] if self.spec.models else ""

    def to_dict(self) -> dict:
        """Serialize using the persisted camelCase layout."""
        return {
            "id": self.id,
            "name": self.name,
            "provider": self.provider.value,
            "apiKey": self.api_key,
            "model": self.model,
            "systemPrompt": self.system_prompt,
            "baseUrl": self.base_url,
            "braveKey": self.brave_key,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AgentProfile":
        """Build a profile from its persisted layout.

        Raises KeyError, TypeError or ValueError on malformed data.
        """
        if not isinstance(data, dict):
            raise TypeError(f"profile entry must be an object, got {type(data).__name__}")
        agent_id = data["id"]
        if not is_valid_agent_id(agent_id):
            raise ValueError(f"invalid profile id {agent_id!r}")
        return cls(
            id=agent_id,
            name=str(data.get("name") or ""),
            provider=Provider(data["provider"]),
            api_key=str(data.get("apiKey") or ""),
            model=str(data.get("model") or ""),
            system_prompt=str(data.get("systemPrompt") or DEFAULT_SYSTEM_PROMPT),
            base_url=data.get("baseUrl") or None,
            brave_key=data.get("braveKey") or None,
        )
