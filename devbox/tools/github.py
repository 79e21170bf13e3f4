"""GitHub CLI (``gh``) operations."""

from __future__ import annotations

from devbox.tools.base import ToolClient


class GitHubClient(ToolClient):
    program = ("gh",)

    async def authenticated(self) -> bool:
        return await self._succeeds("auth", "status")

    async def login(self, scopes: str) -> None:
        """Interactive browser login; waits for the user to finish."""
        await self._check(
            "auth", "login", "--web", "--scopes", scopes, capture=False, timeout=None
        )

    async def token(self) -> str | None:
        returncode, stdout, _ = await self._run("auth", "token")
        if returncode != 0 or not stdout.strip():
            return None
        return stdout.strip()

    async def can_read_user(self) -> bool:
        return await self._succeeds("api", "user")

    async def repo_exists(self, full_repo: str) -> bool:
        return await self._succeeds("repo", "view", full_repo)

    async def create_repo(self, full_repo: str, *, private: bool, description: str) -> None:
        await self._check(
            "repo", "create", full_repo,
            "--private" if private else "--public",
            "--description", description,
            "--clone=false",
        )
