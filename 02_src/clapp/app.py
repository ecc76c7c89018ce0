"""Application bootstrap and lifecycle management."""

import os
from pathlib import Path
from typing import Protocol

from .agents import AgentStore
from .chat import ChatSession
from .config import ONBOARDED_KEY, GatewaySettings, resolve_db_path
from .credentials import CredentialSync
from .gateway import GatewayController, IGatewayProcess, OpenClawProcess, StatusPoller
from .history import HistoryStore
from .logging_config import get_logger
from .storage import IStorage, Storage

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...


class Application:
    """Owns every gateway session component for one running client."""

    def __init__(
        self,
        db_path: str | None = None,
        state_dir: str | Path | None = None,
        settings: GatewaySettings | None = None,
        process: IGatewayProcess | None = None,
    ):
        env_db_path = os.getenv("DATABASE_URL") if db_path is None else db_path
        self._db_path = resolve_db_path(env_db_path)
        self._settings = settings or GatewaySettings.from_env()
        self._state_dir = state_dir
        self._process_override = process

        # Components (will be initialized in start())
        self._storage: IStorage | None = None
        self._agent_store: AgentStore | None = None
        self._history_store: HistoryStore | None = None
        self._credentials: CredentialSync | None = None
        self._process: IGatewayProcess | None = None
        self._controller: GatewayController | None = None
        self._poller: StatusPoller | None = None
        self._chat: ChatSession | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")

        # 1. Storage (no dependencies)
        self._storage = Storage(self._db_path)
        await self._storage.init()
        logger.info("Storage initialized")

        # 2. Stores (depend on Storage)
        self._agent_store = AgentStore(self._storage)
        await self._agent_store.load()
        self._history_store = HistoryStore(self._storage, self._settings.history_limit)

        # 3. Runtime collaborators
        self._credentials = CredentialSync(self._state_dir)
        self._process = self._process_override or OpenClawProcess(
            self._settings, self._credentials, self._agent_store.list
        )

        # 4. Gateway supervision
        self._controller = GatewayController(self._process)
        self._poller = StatusPoller(
            self._controller, self._process, self._settings.poll_interval
        )
        await self._poller.start()

        # 5. Chat (depends on everything above)
        self._chat = ChatSession(
            controller=self._controller,
            agent_store=self._agent_store,
            history_store=self._history_store,
            process=self._process,
            credential_sync=self._credentials,
        )
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order; the gateway process itself keeps running."""
        if self._poller:
            await self._poller.stop()
        if self._storage:
            await self._storage.close()
            logger.info("Storage closed")

    async def is_onboarded(self) -> bool:
        return bool(await self.storage.retrieve(ONBOARDED_KEY))

    async def set_onboarded(self, done: bool = True) -> None:
        await self.storage.persist(ONBOARDED_KEY, done)

    @property
    def storage(self) -> IStorage:
        """Get storage instance."""
        if not self._storage:
            raise RuntimeError("Application not started")
        return self._storage

    @property
    def agents(self) -> AgentStore:
        if not self._agent_store:
            raise RuntimeError("Application not started")
        return self._agent_store

    @property
    def gateway(self) -> GatewayController:
        if not self._controller:
            raise RuntimeError("Application not started")
        return self._controller

    @property
    def chat(self) -> ChatSession:
        if not self._chat:
            raise RuntimeError("Application not started")
        return self._chat
