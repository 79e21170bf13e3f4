"""git operations: global identity and the project repository."""

from __future__ import annotations

from pathlib import Path

from devbox.tools.base import CommandError, ToolClient


class GitClient(ToolClient):
    program = ("git",)

    async def get_global(self, key: str) -> str:
        """Return a global config value, or ``""`` when it is unset."""
        returncode, stdout, _ = await self._run("config", "--global", "--get", key)
        return stdout.strip() if returncode == 0 else ""

    async def set_global(self, key: str, value: str) -> None:
        await self._check("config", "--global", key, value)

    async def init(self, repo: Path) -> None:
        await self._check("init", cwd=repo)

    async def add_remote(self, repo: Path, name: str, url: str) -> None:
        await self._check("remote", "add", name, url, cwd=repo)

    async def stage_all(self, repo: Path) -> None:
        await self._check("add", ".", cwd=repo)

    async def has_staged_changes(self, repo: Path) -> bool:
        """``git diff --cached --quiet`` exits 1 when the index differs from HEAD."""
        returncode, _, stderr = await self._run("diff", "--cached", "--quiet", cwd=repo)
        if returncode not in (0, 1):
            raise CommandError(
                f"Command failed (exit {returncode}): git diff --cached --quiet\n{stderr}",
                command="git diff --cached --quiet",
                stderr=stderr,
            )
        return returncode == 1

    async def commit(self, repo: Path, message: str) -> None:
        await self._check("commit", "-m", message, cwd=repo)
