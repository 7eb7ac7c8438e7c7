"""Restart orchestration for the managed compose stack.

The gateway containers run as uid/gid 1000, while this service may write
state as another user, so a restart first hands ``data/`` back to that user
and then cycles the stack. Commands are awaited without a timeout; a hung
container runtime hangs the restart.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

STATE_SUBDIR = "data"
STATE_OWNER = "1000:1000"


@dataclass(frozen=True)
class CommandResult:
    success: bool
    message: str = ""


@dataclass(frozen=True)
class RestartOutcome:
    attempted: bool
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class DeploymentController(Protocol):
    """Protocol for controlling a deployment's container stack."""

    async def prepare_state(self, data_dir: Path) -> CommandResult: ...

    async def stop(self) -> CommandResult: ...

    async def start(self) -> CommandResult: ...


async def _run(*cmd: str, cwd: str | Path | None = None) -> CommandResult:
    """Run a command and report its outcome instead of raising."""
    logger.debug("%s (cwd=%s)", " ".join(cmd), cwd)
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        return CommandResult(success=False, message=f"{cmd[0]}: {e}")
    _, stderr = await proc.communicate()
    if proc.returncode != 0:
        detail = stderr.decode(errors="replace").strip()
        message = f"{' '.join(cmd)} failed (rc={proc.returncode})"
        return CommandResult(success=False, message=f"{message}: {detail}" if detail else message)
    return CommandResult(success=True)


class ComposeDeploymentController:
    """Drives ``docker compose`` in a deployment directory."""

    def __init__(self, compose_dir: str | Path, container_name: str = "") -> None:
        self.compose_dir = Path(compose_dir)
        self.container_name = container_name

    async def prepare_state(self, data_dir: Path) -> CommandResult:
        return await _run("chown", "-R", STATE_OWNER, str(data_dir))

    async def stop(self) -> CommandResult:
        return await _run("docker", "compose", "down", cwd=self.compose_dir)

    async def start(self) -> CommandResult:
        logger.info("Starting %s from %s", self.container_name or "stack", self.compose_dir)
        return await _run("docker", "compose", "up", "-d", cwd=self.compose_dir)


ControllerFactory = Callable[[str], DeploymentController]


class RestartOrchestrator:
    """Runs the prepare → stop → start sequence, stopping at the first failure."""

    def __init__(self, controller_factory: ControllerFactory | None = None) -> None:
        self._controller_factory = controller_factory or ComposeDeploymentController

    async def restart(self, compose_dir: str) -> RestartOutcome:
        if not (compose_dir or "").strip():
            logger.info("No compose dir configured; skipping restart")
            return RestartOutcome(attempted=False)

        controller = self._controller_factory(compose_dir)
        data_dir = Path(compose_dir) / STATE_SUBDIR
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return RestartOutcome(attempted=True, error=f"create data dir: {e}")

        for step, action in (
            ("prepare state", lambda: controller.prepare_state(data_dir)),
            ("stop", controller.stop),
            ("start", controller.start),
        ):
            result = await action()
            if not result.success:
                logger.warning("Restart of %s failed at %s: %s", compose_dir, step, result.message)
                return RestartOutcome(attempted=True, error=result.message or f"{step} failed")

        logger.info("Restarted stack in %s", compose_dir)
        return RestartOutcome(attempted=True)
