"""Docker engine and Compose operations."""

from __future__ import annotations

from pathlib import Path

from devbox.tools.base import ToolClient
from devbox.utils import CommandRunner


class DockerClient(ToolClient):
    """Runs ``docker`` (optionally through ``sudo``) against one Compose project.

    ``use_sudo`` is needed while the user's new docker group membership is not
    yet active in the current login session.
    """

    def __init__(
        self,
        runner: CommandRunner | None = None,
        *,
        project_dir: Path | None = None,
        use_sudo: bool = False,
    ) -> None:
        super().__init__(runner)
        self.project_dir = project_dir
        self.use_sudo = use_sudo
        # sudo resets the environment; GITHUB_TOKEN must reach docker compose.
        self.program = (
            ("sudo", "--preserve-env=GITHUB_TOKEN", "docker") if use_sudo else ("docker",)
        )

    async def info(self) -> bool:
        """Return ``True`` when the daemon answers ``docker info``."""
        return await self._succeeds("info", timeout=10)

    async def service_running(self, service: str) -> bool:
        returncode, stdout, _ = await self._run(
            "compose", "ps", "-q", service, cwd=self.project_dir
        )
        return returncode == 0 and bool(stdout.strip())

    async def up(self, service: str, env: dict[str, str] | None = None) -> None:
        """Build (if needed) and start *service* detached."""
        await self._check(
            "compose", "up", "--build", "-d", service,
            cwd=self.project_dir, capture=False, timeout=None, env=env,
        )

    async def exec_ok(self, service: str, *args: str, timeout: float | None = 120) -> bool:
        """Run a non-interactive command in the service container."""
        return await self._succeeds(
            "compose", "exec", "-T", service, *args, cwd=self.project_dir, timeout=timeout
        )

    async def ready(self, service: str) -> bool:
        return await self.exec_ok(service, "echo", "ready", timeout=10)
