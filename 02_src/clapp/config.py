"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "03_data"
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_DB_PATH = DATA_DIR / "clapp.db"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DATA_DIR.mkdir(parents=True, exist_ok=True)
LOGS_DIR.mkdir(parents=True, exist_ok=True)

# Storage keys
AGENTS_KEY = "clapp.agents"
HISTORY_KEY_PREFIX = "clapp.history."
ONBOARDED_KEY = "clapp.onboarded"

DEFAULT_HISTORY_LIMIT = 100
DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_GATEWAY_PORT = 18789
DEFAULT_CALL_TIMEOUT_MS = 130000
DEFAULT_OPENCLAW_COMMAND = "npx openclaw"


PathLike = Union[str, Path]


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve DATABASE_URL to an absolute path."""
    if not env_value:
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def resolve_state_dir(env_value: PathLike | None = None) -> Path:
    """Resolve the OpenClaw state directory (defaults to ~/.openclaw)."""
    raw = env_value or os.getenv("OPENCLAW_STATE_DIR")
    if not raw:
        return Path.home() / ".openclaw"
    return Path(raw).expanduser().resolve()


def history_key(agent_id: str) -> str:
    """Storage key holding one agent's conversation log."""
    return f"{HISTORY_KEY_PREFIX}{agent_id}"


@dataclass
class GatewaySettings:
    """Tunables for talking to the local gateway."""

    command: list[str]
    port: int = DEFAULT_GATEWAY_PORT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    call_timeout_ms: int = DEFAULT_CALL_TIMEOUT_MS
    history_limit: int = DEFAULT_HISTORY_LIMIT

    @classmethod
    def from_env(cls) -> "GatewaySettings":
        """Build settings from environment variables."""
        return cls(
            command=os.getenv("OPENCLAW_COMMAND", DEFAULT_OPENCLAW_COMMAND).split(),
            port=int(os.getenv("GATEWAY_PORT", str(DEFAULT_GATEWAY_PORT))),
            poll_interval=float(
                os.getenv("GATEWAY_POLL_INTERVAL", str(DEFAULT_POLL_INTERVAL))
            ),
            call_timeout_ms=int(
                os.getenv("GATEWAY_CALL_TIMEOUT_MS", str(DEFAULT_CALL_TIMEOUT_MS))
            ),
            history_limit=int(
                os.getenv("HISTORY_LIMIT", str(DEFAULT_HISTORY_LIMIT))
            ),
        )
