"""Interactive collection of the project record.

Each field is gathered by a prompt -> sanitize -> validate loop that re-prompts
with a warning until the answer is acceptable.  There is deliberately no
attempt limit.
"""

from __future__ import annotations

from collections.abc import Callable

from devbox.config import Settings
from devbox.errors import StageError
from devbox.models import ProjectRecord
from devbox.prompts import Prompter
from devbox.utils import print_info, print_warning
from devbox.validators import (
    sanitize,
    validate_account_handle,
    validate_project_name,
    validate_repository_name,
)

COLLECT_STAGE = 2


def prompt_until_valid(
    prompter: Prompter,
    text: str,
    validator: Callable[[str], bool],
    warning: str,
    default: str | None = None,
) -> str:
    """Ask until the sanitized answer passes *validator*.

    A blank answer is replaced by *default* when one is given; otherwise it
    counts as invalid.
    """
    while True:
        answer = sanitize(prompter.ask(text))
        if not answer and default is not None:
            answer = default
        if answer and validator(answer):
            return answer
        print_warning(warning)


def collect_project_record(prompter: Prompter, settings: Settings) -> ProjectRecord:
    """Run the collection loops in order and return the finished record.

    Raises:
        StageError: If the development root cannot be created or the project
            directory already exists.
    """
    print_info("Project configuration")

    project_name = prompt_until_valid(
        prompter,
        "Project name (3-39 chars, letters/numbers/hyphens/underscores)",
        validate_project_name,
        "Invalid project name. Use 3-39 characters: letters, numbers, hyphens, underscores",
    )
    account = prompt_until_valid(
        prompter,
        "GitHub username",
        validate_account_handle,
        "Invalid GitHub username (1-39 chars, alphanumeric/hyphens, "
        "no leading/trailing hyphens)",
    )
    repo_name = prompt_until_valid(
        prompter,
        f"Repository name (default: {project_name})",
        validate_repository_name,
        "Invalid repository name. Use letters, numbers, hyphens, underscores",
        default=project_name,
    )
    description = sanitize(prompter.ask("Project description (optional)"))
    if not description:
        description = settings.default_description

    record = ProjectRecord(
        project_name=project_name,
        account=account,
        repo_name=repo_name,
        description=description,
        dev_root=settings.dev_root,
    )

    try:
        settings.dev_root.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StageError(
            COLLECT_STAGE, f"Cannot create development directory {settings.dev_root}: {exc}"
        ) from exc

    if record.project_dir.exists():
        raise StageError(
            COLLECT_STAGE, f"Project directory already exists: {record.project_dir}"
        )

    print_info(f"Project: {record.project_name} at {record.project_dir}")
    print_info(f"GitHub: {record.full_repo}")
    return record
