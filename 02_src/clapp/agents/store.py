"""AgentStore implementation."""

from typing import Protocol

from ..config import AGENTS_KEY
from ..errors import ValidationError
from ..logging_config import get_logger
from ..models import AgentProfile, is_valid_agent_id
from ..storage import IStorage

logger = get_logger(__name__)


def validate_profile(profile: AgentProfile) -> None:
    """Raise ValidationError naming the first offending field."""
    spec = profile.spec

    if not is_valid_agent_id(profile.id):
        raise ValidationError("id", f"Invalid agent id '{profile.id}'")

    if not profile.name.strip():
        raise ValidationError("name", "Name must not be empty")

    if spec.requires_key and not profile.api_key.strip():
        raise ValidationError(
            "apiKey", f"An API key is required for {profile.provider.value}"
        )

    if spec.requires_base_url and not (profile.base_url or "").strip():
        raise ValidationError(
            "baseUrl", f"A base URL is required for {profile.provider.value}"
        )

    if profile.base_url:
        if not spec.accepts_base_url:
            raise ValidationError(
                "baseUrl", f"{profile.provider.value} does not accept a base URL"
            )
        if not profile.base_url.startswith(("http://", "https://")):
            raise ValidationError("baseUrl", "Base URL must start with http:// or https://")

    model = profile.model.strip()
    if model and spec.models and model not in spec.models:
        raise ValidationError(
            "model", f"Unknown model '{model}' for {profile.provider.value}"
        )


class IAgentStore(Protocol):
    """Persisted, validated registry of agent profiles."""

    async def load(self) -> None:
        """Read the persisted profile list into memory."""
        ...

    def list(self) -> list[AgentProfile]:
        """All profiles in insertion order."""
        ...

    def get(self, agent_id: str) -> AgentProfile | None:
        """Profile by id, or None."""
        ...

    async def upsert(self, profile: AgentProfile) -> AgentProfile:
        """Insert or replace by id; raises ValidationError on bad input."""
        ...

    async def delete(self, agent_id: str) -> None:
        """Remove a profile; no-op if absent."""
        ...


class AgentStore:
    """Agent profiles kept in memory and written through to Storage."""

    def __init__(self, storage: IStorage):
        self._storage = storage
        self._profiles: list[AgentProfile] = []

    async def load(self) -> None:
        """Read the persisted profile list; unreadable data yields no profiles."""
        raw = await self._storage.retrieve(AGENTS_KEY)
        self._profiles = []

        if raw is None:
            return
        if not isinstance(raw, list):
            logger.warning("Persisted agent list is not a list, starting empty")
            return

        seen: set[str] = set()
        for entry in raw:
            try:
                profile = AgentProfile.from_dict(entry)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed agent profile: {e}")
                continue
            if profile.id in seen:
                logger.warning(f"Skipping duplicate agent profile {profile.id}")
                continue
            seen.add(profile.id)
            self._profiles.append(profile)

        logger.info(f"Loaded {len(self._profiles)} agent profiles")

    def list(self) -> list[AgentProfile]:
        return list(self._profiles)

    def get(self, agent_id: str) -> AgentProfile | None:
        for profile in self._profiles:
            if profile.id == agent_id:
                return profile
        return None

    async def upsert(self, profile: AgentProfile) -> AgentProfile:
        """Insert if id unseen, else replace in place."""
        validate_profile(profile)

        previous = list(self._profiles)
        for i, existing in enumerate(self._profiles):
            if existing.id == profile.id:
                self._profiles[i] = profile
                break
        else:
            self._profiles.append(profile)

        try:
            await self._write()
        except Exception:
            self._profiles = previous
            raise

        logger.info(f"Saved agent profile {profile.id} ({profile.provider.value})")
        return profile

    async def delete(self, agent_id: str) -> None:
        """Remove the profile; history purge is the caller's job."""
        if self.get(agent_id) is None:
            return

        previous = list(self._profiles)
        self._profiles = [p for p in self._profiles if p.id != agent_id]

        try:
            await self._write()
        except Exception:
            self._profiles = previous
            raise

        logger.info(f"Deleted agent profile {agent_id}")

    async def _write(self) -> None:
        await self._storage.persist(
            AGENTS_KEY, [profile.to_dict() for profile in self._profiles]
        )
