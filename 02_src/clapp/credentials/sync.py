"""Credential sync into the OpenClaw runtime's on-disk agent profiles.

The runtime reads per-agent credentials from
``<state_dir>/agents/<agent_id>/agent/auth-profiles.json`` and identity and
instructions from ``agent.json`` next to it. It falls back to the ``main``
agent for several operations, so every sync writes both.
"""

import asyncio
import json
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Iterable, Protocol

from ..config import DEFAULT_GATEWAY_PORT, resolve_state_dir
from ..errors import CredentialSyncError
from ..logging_config import get_logger
from ..models import AgentProfile, is_valid_agent_id

logger = get_logger(__name__)

DEFAULT_AGENT_ID = "main"
GATEWAY_CONFIG_FILE = "openclaw.json"
LEGACY_CONFIG_KEYS = ("providers", "version")


class ICredentialSync(Protocol):
    """Pushes a profile's credentials and behaviour to the runtime."""

    async def sync(self, profile: AgentProfile) -> None:
        """Write the profile; raises CredentialSyncError on failure."""
        ...


def _write_json(path: Path, data: dict) -> None:
    """Atomically replace path with pretty-printed JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def build_auth_profiles(profile: AgentProfile) -> dict:
    provider = profile.provider.value
    profile_name = f"{provider}:default"
    key = profile.api_key.strip() or f"{provider}-local"

    entry: dict[str, Any] = {"type": "api_key", "provider": provider, "key": key}
    base_url = profile.base_url or profile.spec.default_base_url
    if base_url:
        entry["baseUrl"] = base_url

    return {
        "version": 1,
        "profiles": {profile_name: entry},
        "lastGood": {provider: profile_name},
        "usageStats": {},
    }


def build_agent_config(profile: AgentProfile) -> dict:
    config: dict[str, Any] = {
        "name": profile.name,
        "instructions": profile.system_prompt,
    }
    model = profile.resolved_model
    if model:
        config["model"] = f"{profile.provider.value}/{model}"
    if profile.brave_key:
        config["tools"] = {
            "webSearch": {"provider": "brave", "apiKey": profile.brave_key}
        }
    return config


def build_runtime_env(profiles: Iterable[AgentProfile]) -> dict[str, str]:
    """Provider key variables for the gateway process; later profiles win."""
    env: dict[str, str] = {}
    for profile in profiles:
        var = profile.spec.env_var
        if var and profile.api_key.strip():
            env[var] = profile.api_key.strip()
    return env


def generate_token() -> str:
    """Token for the gateway-to-client handshake."""
    return f"local-{time.time_ns():x}-{os.getpid():x}"


class CredentialSync:
    """Writes agent credentials where the OpenClaw runtime expects them."""

    def __init__(self, state_dir: str | Path | None = None):
        self._state_dir = resolve_state_dir(state_dir)

    @property
    def state_dir(self) -> Path:
        return self._state_dir

    @property
    def config_path(self) -> Path:
        return self._state_dir / GATEWAY_CONFIG_FILE

    def agent_dir(self, agent_id: str) -> Path:
        return self._state_dir / "agents" / agent_id / "agent"

    async def sync(self, profile: AgentProfile) -> None:
        """Write auth and agent config for the profile and the default agent."""
        if not is_valid_agent_id(profile.id):
            raise CredentialSyncError("Invalid agent id", repr(profile.id))
        if profile.spec.requires_key and not profile.api_key.strip():
            raise CredentialSyncError("API key is empty")

        try:
            await asyncio.to_thread(self._write_profile, profile)
        except OSError as e:
            logger.error(f"Credential sync failed for {profile.id}: {e}")
            raise CredentialSyncError("Could not write runtime credentials", str(e)) from e

        logger.info(
            "Synced credentials",
            extra={"context": {"agent_id": profile.id, "provider": profile.provider.value}},
        )

    def _write_profile(self, profile: AgentProfile) -> None:
        auth = build_auth_profiles(profile)
        config = build_agent_config(profile)
        for agent_id in (profile.id, DEFAULT_AGENT_ID):
            target = self.agent_dir(agent_id)
            _write_json(target / "auth-profiles.json", auth)
            _write_json(target / "agent.json", config)

    def ensure_gateway_config(self, port: int = DEFAULT_GATEWAY_PORT) -> str:
        """Create or clean openclaw.json; return the gateway auth token."""
        path = self.config_path
        data = self._read_config()

        if data is not None:
            for key in LEGACY_CONFIG_KEYS:
                data.pop(key, None)
            token = _token_of(data)
            if token:
                _write_json(path, data)
                return token

        token = generate_token()
        _write_json(
            path,
            {
                "gateway": {
                    "mode": "local",
                    "port": port,
                    "bind": "loopback",
                    "auth": {"token": token},
                }
            },
        )
        logger.info(f"Initialized gateway config at {path}")
        return token

    def read_gateway_token(self) -> str | None:
        """Token from openclaw.json, or None when missing or unreadable."""
        data = self._read_config()
        if data is None:
            return None
        return _token_of(data)

    def _read_config(self) -> dict | None:
        try:
            data = json.loads(self.config_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Unreadable gateway config {self.config_path}: {e}")
            return None
        return data if isinstance(data, dict) else None


def _token_of(config: dict) -> str | None:
    gateway = config.get("gateway")
    auth = gateway.get("auth") if isinstance(gateway, dict) else None
    token = auth.get("token") if isinstance(auth, dict) else None
    return token if isinstance(token, str) and token else None
