"""pacman package management."""

from __future__ import annotations

from devbox.tools.base import ToolClient


class PackageManager(ToolClient):
    """Installs OS packages through ``sudo pacman``.

    Output is streamed to the terminal and there is no timeout: a full system
    upgrade can legitimately take a long time.
    """

    program = ("sudo", "pacman")

    async def refresh(self) -> None:
        await self._check("-Syu", "--noconfirm", capture=False, timeout=None)

    async def install(self, packages: list[str]) -> None:
        await self._check(
            "-S", "--needed", "--noconfirm", *packages, capture=False, timeout=None
        )
