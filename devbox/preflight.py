"""Preflight checks run before anything on the host is modified.

Every check is a fail-fast gate except docker group membership, which only
records that the user will have to log in again once the installer has added
them to the group.
"""

from __future__ import annotations

import getpass
import os
import shutil
from pathlib import Path

import httpx

from devbox.config import Settings
from devbox.errors import StageError
from devbox.tools import SystemClient
from devbox.utils import print_info, print_success, print_warning

PREFLIGHT_STAGE = 1


class PreflightChecker:
    """Verifies the execution environment.

    Attributes:
        settings: Thresholds, marker file and reachability target.
        system: Client used for the sudo probe and group lookup.
    """

    def __init__(self, settings: Settings, system: SystemClient | None = None) -> None:
        self.settings = settings
        self.system = system or SystemClient()

    async def run(self) -> bool:
        """Run all checks in order.

        Returns:
            ``True`` if the user is not yet in the docker group, meaning a
            fresh login will be required after installation.

        Raises:
            StageError: On the first failed gate.
        """
        print_info("Checking system requirements...")

        self.check_not_root()
        self.check_required_tools()
        self.check_platform()
        self.check_disk_space()
        await self.check_network()
        await self.check_sudo()
        relogin = not await self.check_docker_group()

        print_success("System requirements met")
        return relogin

    # -- Individual gates --------------------------------------------------

    def check_not_root(self) -> None:
        if os.geteuid() == 0:
            raise StageError(
                PREFLIGHT_STAGE,
                "Do not run as root. Use a regular user with sudo privileges.",
            )

    def check_required_tools(self) -> None:
        for tool in self.settings.required_tools:
            if shutil.which(tool) is None:
                raise StageError(
                    PREFLIGHT_STAGE,
                    f"{tool} is required but not installed. "
                    f"Please install it first: sudo pacman -S {tool}",
                )

    def check_platform(self) -> None:
        if not Path(self.settings.release_marker).exists():
            raise StageError(PREFLIGHT_STAGE, "This tool is designed for Arch Linux only.")

    def check_disk_space(self) -> None:
        home = Path.home()
        available_mb = shutil.disk_usage(home).free // (1024 * 1024)
        if available_mb < self.settings.min_disk_space_mb:
            raise StageError(
                PREFLIGHT_STAGE,
                f"Insufficient disk space in {home}. Need "
                f"{self.settings.min_disk_space_mb}MB, have {available_mb}MB",
            )

    async def check_network(self) -> None:
        url = self.settings.network_check_url
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.network_timeout),
                follow_redirects=True,
            ) as client:
                response = await client.get(url)
        except httpx.HTTPError as exc:
            raise StageError(
                PREFLIGHT_STAGE, f"Network connectivity check failed - cannot reach {url}"
            ) from exc
        if response.is_error:
            raise StageError(
                PREFLIGHT_STAGE,
                f"Network connectivity check failed - {url} answered {response.status_code}",
            )

    async def check_sudo(self) -> None:
        if not await self.system.validate_sudo():
            raise StageError(
                PREFLIGHT_STAGE,
                "Sudo access required for package installation and Docker setup",
            )

    async def check_docker_group(self) -> bool:
        """Return ``True`` when the user already belongs to the docker group."""
        if await self.system.in_group(getpass.getuser(), self.settings.docker_group):
            return True
        print_warning("User not in docker group. Will add to docker group during setup.")
        print_warning("You will need to log out and back in after setup completes.")
        return False
