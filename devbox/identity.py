"""git identity and GitHub authentication."""

from __future__ import annotations

from devbox.config import Settings
from devbox.errors import StageError
from devbox.models import ProjectRecord
from devbox.prompts import Prompter
from devbox.tools import CommandError, GitClient, GitHubClient
from devbox.utils import print_info, print_success, print_warning
from devbox.validators import validate_email

IDENTITY_STAGE = 4


class IdentityConfigurator:
    """Makes sure commits can be authored and pushed.

    Existing configuration is never overwritten: a global git identity or a
    valid ``gh`` session found on the host is used as-is.
    """

    def __init__(
        self,
        settings: Settings,
        prompter: Prompter,
        git: GitClient | None = None,
        github: GitHubClient | None = None,
    ) -> None:
        self.settings = settings
        self.prompter = prompter
        self.git = git or GitClient()
        self.github = github or GitHubClient()

    async def run(self, record: ProjectRecord) -> None:
        await self.configure_git()
        await self.authenticate_github()
        await self.ensure_repository(record)
        print_success("GitHub configured")

    # -- git ---------------------------------------------------------------

    async def configure_git(self) -> None:
        print_info("Configuring Git...")
        current_name = await self.git.get_global("user.name")
        current_email = await self.git.get_global("user.email")
        if current_name and current_email:
            print_success(f"Git already configured: {current_name} <{current_email}>")
            return

        while True:
            name = self.prompter.ask("Your full name for Git").strip()
            if len(name) >= 2:
                break
            print_warning("Please enter a valid name")

        while True:
            email = self.prompter.ask("Your email for Git").strip()
            if validate_email(email):
                break
            print_warning("Please enter a valid email")

        try:
            await self.git.set_global("user.name", name)
            await self.git.set_global("user.email", email)
        except CommandError as exc:
            raise StageError(IDENTITY_STAGE, f"Failed to configure Git identity: {exc}") from exc

        branch = self.settings.default_branch
        if self.prompter.confirm(f"Set default branch to '{branch}'?", default=True):
            try:
                await self.git.set_global("init.defaultBranch", branch)
            except CommandError as exc:
                raise StageError(IDENTITY_STAGE, f"Failed to set default branch: {exc}") from exc

        print_success("Git configured")

    # -- GitHub ------------------------------------------------------------

    async def authenticate_github(self) -> None:
        print_info("Setting up GitHub...")
        scopes = self.settings.scopes_arg

        if not await self.github.authenticated():
            print_info("GitHub CLI authentication required")
            try:
                await self.github.login(scopes)
            except CommandError as exc:
                raise StageError(IDENTITY_STAGE, f"GitHub CLI authentication failed: {exc}") from exc

        print_info("Validating GitHub CLI authentication...")
        if await self.github.token() is None:
            raise StageError(
                IDENTITY_STAGE,
                "GitHub CLI authentication failed. Please run 'gh auth login' manually.",
            )
        if not await self.github.can_read_user():
            raise StageError(
                IDENTITY_STAGE,
                "GitHub token lacks required permissions. Please re-authenticate "
                f"with 'gh auth login --scopes {scopes}'",
            )
        print_success("GitHub CLI authentication validated")

    async def ensure_repository(self, record: ProjectRecord) -> bool:
        """Create the remote repository if it is missing.

        Returns:
            ``True`` if a repository was created.
        """
        if await self.github.repo_exists(record.full_repo):
            print_info(f"Repository already exists: {record.repo_web_url}")
            return False

        private = self.prompter.confirm("Make repository private?", default=False)
        try:
            await self.github.create_repo(
                record.full_repo, private=private, description=record.description
            )
        except CommandError as exc:
            raise StageError(IDENTITY_STAGE, f"Repository creation failed: {exc}") from exc
        print_success(f"Repository created: {record.repo_web_url}")
        return True
