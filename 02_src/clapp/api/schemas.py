"""Request/response models for the HTTP API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..models import (
    DEFAULT_SYSTEM_PROMPT,
    AgentProfile,
    ConversationMessage,
    GatewayState,
    Provider,
    ProviderSpec,
)


class CamelModel(BaseModel):
    """Accepts both snake_case and the client's camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)


class StatusResponse(BaseModel):
    """Response model for status."""

    status: str


class AgentRequest(CamelModel):
    """Create or update an agent profile."""

    id: str | None = None
    name: str = ""
    provider: Provider
    api_key: str = Field("", alias="apiKey")
    model: str = ""
    system_prompt: str = Field(DEFAULT_SYSTEM_PROMPT, alias="systemPrompt")
    base_url: str | None = Field(None, alias="baseUrl")
    brave_key: str | None = Field(None, alias="braveKey")

    def to_profile(self, existing: AgentProfile | None = None) -> AgentProfile:
        """Build a profile; an omitted key keeps the stored one.

        The id is only kept when it names a stored profile, so new profiles
        always get a freshly generated id.
        """
        api_key = self.api_key
        if not api_key and existing is not None:
            api_key = existing.api_key

        profile = AgentProfile(
            name=self.name.strip(),
            provider=self.provider,
            api_key=api_key.strip(),
            model=self.model.strip(),
            system_prompt=self.system_prompt,
            base_url=(self.base_url or "").strip() or None,
            brave_key=(self.brave_key or "").strip() or None,
        )
        if existing is not None:
            profile.id = existing.id
        return profile


class AgentResponse(CamelModel):
    """Agent profile as shown to the client; secrets are never echoed."""

    id: str
    name: str
    provider: Provider
    model: str
    system_prompt: str = Field(alias="systemPrompt")
    base_url: str | None = Field(None, alias="baseUrl")
    api_key_set: bool = Field(alias="apiKeySet")
    web_search: bool = Field(alias="webSearch")

    @classmethod
    def from_profile(cls, profile: AgentProfile) -> "AgentResponse":
        return cls(
            id=profile.id,
            name=profile.name,
            provider=profile.provider,
            model=profile.resolved_model,
            system_prompt=profile.system_prompt,
            base_url=profile.base_url,
            api_key_set=bool(profile.api_key),
            web_search=bool(profile.brave_key),
        )


class ProviderResponse(CamelModel):
    id: Provider
    requires_key: bool = Field(alias="requiresKey")
    accepts_base_url: bool = Field(alias="acceptsBaseUrl")
    default_base_url: str | None = Field(None, alias="defaultBaseUrl")
    models: list[str]

    @classmethod
    def from_spec(cls, provider: Provider, spec: ProviderSpec) -> "ProviderResponse":
        return cls(
            id=provider,
            requires_key=spec.requires_key,
            accepts_base_url=spec.accepts_base_url,
            default_base_url=spec.default_base_url,
            models=list(spec.models),
        )


class GatewayResponse(CamelModel):
    phase: str
    last_error: str | None = Field(None, alias="lastError")

    @classmethod
    def from_state(cls, state: GatewayState) -> "GatewayResponse":
        return cls(phase=state.phase.value, last_error=state.last_error)


class ChatRequest(BaseModel):
    """Request model for sending a message."""

    text: str


class MessageResponse(BaseModel):
    role: str
    text: str
    timestamp: datetime

    @classmethod
    def from_message(cls, message: ConversationMessage) -> "MessageResponse":
        return cls(role=message.role.value, text=message.text, timestamp=message.timestamp)


class OnboardingState(BaseModel):
    completed: bool
