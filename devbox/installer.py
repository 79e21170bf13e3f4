"""Dependency installation: OS packages and the Docker service."""

from __future__ import annotations

import getpass

from devbox.config import Settings
from devbox.errors import StageError
from devbox.tools import CommandError, DockerClient, PackageManager, SystemClient
from devbox.utils import print_info, print_success, wait_until

INSTALL_STAGE = 3


class DependencyInstaller:
    """Idempotently installs packages and brings the Docker daemon up.

    Re-running on a fully provisioned host only refreshes the package
    database; ``pacman --needed`` skips installed packages and an active
    docker service is left alone.
    """

    def __init__(
        self,
        settings: Settings,
        packages: PackageManager | None = None,
        system: SystemClient | None = None,
        docker: DockerClient | None = None,
    ) -> None:
        self.settings = settings
        self.packages = packages or PackageManager()
        self.system = system or SystemClient()
        # The daemon probe must run as root: group membership may not be active yet.
        self.docker = docker or DockerClient(use_sudo=True)

    async def run(self) -> bool:
        """Install everything.

        Returns:
            ``True`` if the user was added to the docker group during this
            run and has to log in again for it to take effect.
        """
        print_info("Installing dependencies...")
        await self.install_packages()
        await self.start_docker()
        relogin = await self.ensure_docker_group()
        print_success("Dependencies installed")
        return relogin

    async def install_packages(self) -> None:
        try:
            await self.packages.refresh()
        except CommandError as exc:
            raise StageError(INSTALL_STAGE, f"Failed to update package database: {exc}") from exc
        try:
            await self.packages.install(self.settings.packages)
        except CommandError as exc:
            raise StageError(INSTALL_STAGE, f"Package installation failed: {exc}") from exc

    async def start_docker(self) -> None:
        print_info("Setting up Docker...")
        if await self.system.service_active("docker"):
            return

        try:
            await self.system.start_service("docker")
        except CommandError as exc:
            raise StageError(INSTALL_STAGE, f"Failed to start Docker service: {exc}") from exc
        try:
            await self.system.enable_service("docker")
        except CommandError as exc:
            raise StageError(INSTALL_STAGE, f"Failed to enable Docker service: {exc}") from exc

        ready = await wait_until(
            self.docker.info,
            retries=self.settings.docker_wait_timeout,
            interval=self.settings.poll_interval,
        )
        if not ready:
            raise StageError(
                INSTALL_STAGE,
                f"Docker failed to start within {self.settings.docker_wait_timeout} seconds",
            )

    async def ensure_docker_group(self) -> bool:
        user = getpass.getuser()
        group = self.settings.docker_group
        if await self.system.in_group(user, group):
            print_success("Docker configured")
            return False
        try:
            await self.system.add_user_to_group(user, group)
        except CommandError as exc:
            raise StageError(INSTALL_STAGE, f"Failed to add user to docker group: {exc}") from exc
        print_success("Docker configured")
        return True
