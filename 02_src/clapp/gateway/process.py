"""OpenClaw gateway process driven through its CLI."""

import asyncio
import json
import os
import re
from typing import Callable, Iterable, Protocol

from ..config import GatewaySettings
from ..credentials import CredentialSync, build_runtime_env
from ..errors import ProcessError, TransportError
from ..logging_config import get_logger
from ..models import AgentProfile, PendingRequest

logger = get_logger(__name__)

RUNNING = "running"
STOPPED = "stopped"

_HEALTH_OK = re.compile(r"\bok\b", re.IGNORECASE)


class IGatewayProcess(Protocol):
    """Boundary primitives for the supervised gateway process."""

    async def start(self) -> None:
        """Bring the gateway up; raises ProcessError on failure."""
        ...

    async def stop(self) -> None:
        """Bring the gateway down; raises ProcessError on failure."""
        ...

    async def status(self) -> str:
        """'running' or any other string."""
        ...

    async def invoke(self, request: PendingRequest) -> str:
        """Run one agent turn; returns the raw JSON reply text."""
        ...


class OpenClawProcess:
    """Spawns and talks to `openclaw gateway` via asyncio subprocesses."""

    HEALTH_ATTEMPTS = 20
    HEALTH_DELAY = 0.5
    STOP_GRACE = 5.0

    def __init__(
        self,
        settings: GatewaySettings,
        credentials: CredentialSync,
        profiles: Callable[[], Iterable[AgentProfile]] | None = None,
    ):
        self._settings = settings
        self._credentials = credentials
        self._profiles = profiles
        self._child: asyncio.subprocess.Process | None = None
        self._drain_task: asyncio.Task | None = None

    async def _run(self, *args: str) -> tuple[int, str, str]:
        """Run a gateway CLI subcommand to completion."""
        process = await asyncio.create_subprocess_exec(
            *self._settings.command,
            "gateway",
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()
        return (
            process.returncode if process.returncode is not None else -1,
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
        )

    async def status(self) -> str:
        _, stdout, stderr = await self._run("health")
        if _HEALTH_OK.search(stdout) or _HEALTH_OK.search(stderr):
            return RUNNING
        return STOPPED

    async def _healthy(self) -> bool:
        try:
            return await self.status() == RUNNING
        except OSError as e:
            logger.debug(f"Health check failed: {e}")
            return False

    def _child_env(self) -> dict[str, str]:
        """Inherited environment plus provider keys of the stored profiles."""
        env = dict(os.environ)
        if self._profiles is not None:
            env.update(build_runtime_env(self._profiles()))
        return env

    async def start(self) -> None:
        try:
            token = await asyncio.to_thread(
                self._credentials.ensure_gateway_config, self._settings.port
            )
        except OSError as e:
            raise ProcessError("Could not prepare gateway config", str(e)) from e

        if await self._healthy():
            logger.info("Gateway already running")
            return

        if self._child is not None:
            # Previous child is no longer healthy
            await self._discard_child()

        try:
            self._child = await asyncio.create_subprocess_exec(
                *self._settings.command,
                "gateway",
                "run",
                "--port",
                str(self._settings.port),
                "--bind",
                "loopback",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                env=self._child_env(),
            )
        except OSError as e:
            raise ProcessError("Failed to launch gateway", str(e)) from e

        logger.info(f"Spawned gateway (PID: {self._child.pid})")
        self._drain_task = asyncio.create_task(self._drain_output(self._child))

        try:
            await self._wait_healthy(self._child)
        except BaseException:
            await self._discard_child()
            raise

        await self._pair(token)

    async def _wait_healthy(self, child: asyncio.subprocess.Process) -> None:
        for _ in range(self.HEALTH_ATTEMPTS):
            await asyncio.sleep(self.HEALTH_DELAY)
            if child.returncode is not None:
                raise ProcessError(
                    "Gateway exited during startup",
                    f"exit code {child.returncode}",
                )
            if await self._healthy():
                return

        timeout = self.HEALTH_ATTEMPTS * self.HEALTH_DELAY
        raise ProcessError(
            f"Gateway did not come up within {timeout:g}s",
            "check that openclaw is installed: npm install -g openclaw",
        )

    async def _discard_child(self) -> None:
        """Kill a child that never became healthy; errors are logged only."""
        child, self._child = self._child, None
        if self._drain_task:
            self._drain_task.cancel()
            self._drain_task = None
        if child is None or child.returncode is not None:
            return

        try:
            child.terminate()
            try:
                await asyncio.wait_for(child.wait(), timeout=self.STOP_GRACE)
            except asyncio.TimeoutError:
                child.kill()
                await child.wait()
        except ProcessLookupError:
            pass
        except OSError as e:
            logger.error(f"Could not kill gateway (PID: {child.pid}): {e}")

    async def _pair(self, token: str) -> None:
        """Authorize this client with the gateway; failures are logged only."""
        try:
            code, stdout, stderr = await self._run("pair", "--token", token)
        except OSError as e:
            logger.warning(f"Gateway pairing failed: {e}")
            return
        if code != 0:
            logger.warning(f"Gateway pairing exited with {code}: {(stdout + stderr).strip()}")

    async def _drain_output(self, child: asyncio.subprocess.Process) -> None:
        if child.stdout is None:
            return
        while True:
            line = await child.stdout.readline()
            if not line:
                break
            logger.debug(f"[gateway] {line.decode('utf-8', errors='replace').rstrip()}")

    async def stop(self) -> None:
        child, self._child = self._child, None
        if child is None:
            return

        try:
            if child.returncode is None:
                child.terminate()
                try:
                    await asyncio.wait_for(child.wait(), timeout=self.STOP_GRACE)
                except asyncio.TimeoutError:
                    child.kill()
                    await child.wait()
        except ProcessLookupError:
            pass
        except OSError as e:
            self._child = child
            raise ProcessError("Failed to stop gateway", str(e)) from e
        finally:
            if self._drain_task:
                self._drain_task.cancel()
                self._drain_task = None

        logger.info("Gateway stopped")

    async def invoke(self, request: PendingRequest) -> str:
        args = [
            "call",
            "agent",
            "--json",
            "--expect-final",
            "--timeout",
            str(self._settings.call_timeout_ms),
            "--params",
            json.dumps(request.to_params(), ensure_ascii=False),
        ]
        token = await asyncio.to_thread(self._credentials.read_gateway_token)
        if token:
            args += ["--token", token]

        try:
            _, stdout, stderr = await self._run(*args)
        except OSError as e:
            raise TransportError("Gateway call failed", str(e)) from e

        stdout = stdout.strip()
        if not stdout:
            raise TransportError(stderr.strip() or "Empty response from gateway")
        return stdout
