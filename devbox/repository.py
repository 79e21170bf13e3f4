"""Initialise the project's git repository and make the first commit."""

from __future__ import annotations

from devbox import __version__
from devbox.errors import StageError
from devbox.models import ProjectRecord
from devbox.tools import CommandError, GitClient
from devbox.utils import print_info, print_success

REPOSITORY_STAGE = 6

COMMIT_MESSAGE = "Initial commit from devbox setup v{version}"


class RepositoryInitializer:
    """Idempotent ``git init`` + remote + commit for a scaffolded project."""

    def __init__(self, git: GitClient | None = None) -> None:
        self.git = git or GitClient()

    async def run(self, record: ProjectRecord) -> bool:
        """Initialise (if needed), stage everything, and commit if anything changed.

        Returns:
            ``True`` if a commit was created; ``False`` when the index already
            matched the last commit.
        """
        print_info("Setting up Git repository...")
        repo = record.project_dir

        if not (repo / ".git").exists():
            try:
                await self.git.init(repo)
            except CommandError as exc:
                raise StageError(REPOSITORY_STAGE, f"Failed to initialize Git repository: {exc}") from exc
            if record.remote_url:
                try:
                    await self.git.add_remote(repo, "origin", record.remote_url)
                except CommandError as exc:
                    raise StageError(REPOSITORY_STAGE, f"Failed to add remote origin: {exc}") from exc

        try:
            await self.git.stage_all(repo)
            changed = await self.git.has_staged_changes(repo)
        except CommandError as exc:
            raise StageError(REPOSITORY_STAGE, f"Failed to stage project files: {exc}") from exc

        committed = False
        if changed:
            try:
                await self.git.commit(repo, COMMIT_MESSAGE.format(version=__version__))
            except CommandError as exc:
                raise StageError(REPOSITORY_STAGE, f"Failed to create initial commit: {exc}") from exc
            print_success("Initial commit created")
            committed = True

        print_success("Git repository initialized")
        return committed
