"""Host-level operations: sudo, group membership, systemd services."""

from __future__ import annotations

from devbox.tools.base import ToolClient


class SystemClient(ToolClient):
    """Thin wrapper over ``sudo``, ``id``, ``usermod`` and ``systemctl``."""

    async def validate_sudo(self) -> bool:
        """Probe for sudo rights; the user may be asked for a password."""
        return await self._succeeds("sudo", "-v", capture=False, timeout=None)

    async def user_groups(self, user: str) -> list[str]:
        returncode, stdout, _ = await self._run("id", "-nG", user)
        if returncode != 0:
            return []
        return stdout.split()

    async def in_group(self, user: str, group: str) -> bool:
        return group in await self.user_groups(user)

    async def add_user_to_group(self, user: str, group: str) -> None:
        await self._check("sudo", "usermod", "-aG", group, user)

    async def service_active(self, service: str) -> bool:
        return await self._succeeds("systemctl", "is-active", "--quiet", service)

    async def start_service(self, service: str) -> None:
        await self._check("sudo", "systemctl", "start", service, timeout=None)

    async def enable_service(self, service: str) -> None:
        await self._check("sudo", "systemctl", "enable", service)
