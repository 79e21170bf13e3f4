"""Project scaffolding.

Turns a ``ProjectRecord`` into the project directory: environment file,
Dockerfile, Compose file, management script, devcontainer config, ignore rules
and README.  Rendering (``render_files``) is a pure function of the context;
``scaffold`` performs the filesystem writes.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from devbox import __version__
from devbox.config import Settings
from devbox.errors import StageError
from devbox.models import ProjectRecord
from devbox.utils import print_info, print_success

from .templates import TemplateRenderer

SCAFFOLD_STAGE = 5


@dataclass(frozen=True)
class GeneratedFile:
    """One templated file: template name, output path and optional mode."""

    template: str
    path: str
    mode: int | None = None


PROJECT_FILES: tuple[GeneratedFile, ...] = (
    GeneratedFile("env.j2", ".env", 0o600),
    GeneratedFile("Dockerfile.j2", "Dockerfile"),
    GeneratedFile("devcontainer.json.j2", ".devcontainer/devcontainer.json"),
    GeneratedFile("docker-compose.yml.j2", "docker-compose.yml"),
    GeneratedFile("claude.sh.j2", "claude.sh", 0o755),
    GeneratedFile("gitignore.j2", ".gitignore"),
    GeneratedFile("README.md.j2", "README.md"),
)

# Directories created before any file, with their modes.
PROJECT_DIRS: dict[str, int] = {
    ".devcontainer": 0o700,
}


def build_context(
    record: ProjectRecord,
    settings: Settings,
    uid: int | None = None,
    gid: int | None = None,
) -> dict[str, Any]:
    """Flatten the record and settings into the template context.

    ``uid``/``gid`` default to the invoking user's ids.
    """
    container = settings.container
    return {
        "project_name": record.project_name,
        "github_repo": record.full_repo,
        "github_url": record.remote_url,
        "repo_web_url": record.repo_web_url,
        "description": record.description,
        "user_id": os.getuid() if uid is None else uid,
        "gid": os.getgid() if gid is None else gid,
        "version": __version__,
        "wait_timeout": settings.docker_wait_timeout,
        "container": {
            "service_name": container.service_name,
            "container_name": container.container_name(record.project_name),
            "auth_volume": container.auth_volume(record.project_name),
            "remote_user": container.remote_user,
            "home": container.home,
            "base_image": container.base_image,
            "npm_package": container.npm_package,
            "workspace": container.workspace,
        },
        "mcp_servers": [server.model_dump() for server in settings.mcp_servers],
    }


class ProjectScaffolder:
    """Creates a new project directory from the fixed set of templates.

    An existing directory is never merged into or overwritten.  Files are
    first rendered into a staging directory and then copied into place in one
    ``copytree`` call, which itself refuses an existing destination.
    """

    def __init__(self, settings: Settings, renderer: TemplateRenderer | None = None) -> None:
        self.settings = settings
        self.renderer = renderer or TemplateRenderer()

    def render_files(self, context: dict[str, Any]) -> dict[str, str]:
        """Render every project file; returns ``{relative path: content}``."""
        return {
            entry.path: self.renderer.render(entry.template, context)
            for entry in PROJECT_FILES
        }

    def scaffold(self, record: ProjectRecord, workdir: Path | None = None) -> Path:
        """Generate the project directory for *record*.

        Args:
            record: The collected project record.
            workdir: Scratch directory for staging; a private temporary
                directory is used when omitted.

        Returns:
            Path to the created project directory.

        Raises:
            StageError: If the directory already exists or cannot be written.
        """
        project_dir = record.project_dir
        if project_dir.exists():
            raise StageError(SCAFFOLD_STAGE, f"Project directory already exists: {project_dir}")

        print_info("Creating project structure...")
        files = self.render_files(build_context(record, self.settings))

        if workdir is None:
            with tempfile.TemporaryDirectory(prefix="devbox-stage-") as tmp:
                self._materialise(files, Path(tmp), project_dir)
        else:
            self._materialise(files, Path(workdir), project_dir)

        print_success("Project structure created")
        return project_dir

    def _materialise(self, files: dict[str, str], workdir: Path, project_dir: Path) -> None:
        staging = workdir / project_dir.name
        try:
            staging.mkdir(mode=0o700)
            for rel, mode in PROJECT_DIRS.items():
                (staging / rel).mkdir(parents=True, exist_ok=True)
                (staging / rel).chmod(mode)
            for entry in PROJECT_FILES:
                write_file(staging / entry.path, files[entry.path], entry.mode)
            shutil.copytree(staging, project_dir)
        except FileExistsError as exc:
            raise StageError(
                SCAFFOLD_STAGE, f"Project directory already exists: {project_dir}"
            ) from exc
        except OSError as exc:
            raise StageError(
                SCAFFOLD_STAGE, f"Cannot create project directory {project_dir}: {exc}"
            ) from exc
        finally:
            shutil.rmtree(staging, ignore_errors=True)


def write_file(path: Path, content: str, mode: int | None = None) -> None:
    """Create parent dirs, write *content* and apply *mode* if given."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    if mode is not None:
        path.chmod(mode)
