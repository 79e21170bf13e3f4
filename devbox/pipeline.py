"""devbox-setup pipeline orchestrator.

Implements the 7-stage provisioning pipeline:

Stage 1: PREFLIGHT  -- Not root, required tools, Arch Linux, disk, network, sudo.
Stage 2: COLLECT    -- Project name, GitHub account, repository, description.
Stage 3: INSTALL    -- pacman packages, Docker service, docker group.
Stage 4: IDENTITY   -- git identity, gh authentication, remote repository.
Stage 5: SCAFFOLD   -- Project directory from templates.
Stage 6: REPOSITORY -- git init, remote, initial commit.
Stage 7: PLUGINS    -- Start the container and register MCP servers.

Stages run strictly in order; the first failure stops the run.  There is no
resume: a failed run is retried from the beginning.

Usage::

    devbox-setup
    python -m devbox.pipeline --version
"""

from __future__ import annotations

import asyncio
import os
import signal
import sys
import tempfile
import time
import traceback
from pathlib import Path
from typing import Any

from devbox import __version__
from devbox.collector import collect_project_record
from devbox.config import Settings
from devbox.errors import StageError
from devbox.identity import IdentityConfigurator
from devbox.installer import DependencyInstaller
from devbox.models import ProjectRecord, RegistrationReport
from devbox.plugins import PluginRegistrar
from devbox.preflight import PreflightChecker
from devbox.prompts import Prompter, RichPrompter
from devbox.repository import RepositoryInitializer
from devbox.scaffolder import ProjectScaffolder
from devbox.utils import (
    STAGE_NAMES,
    console,
    print_banner,
    print_error,
    print_stage_header,
    print_success,
    print_summary_table,
    print_warning,
)


class Pipeline:
    """devbox-setup pipeline orchestrator.

    Stage objects are created up front and can be replaced before
    :meth:`run` (tests substitute ones built on fake runners).

    Attributes:
        settings: Global configuration.
        prompter: Source of interactive answers.
        workdir: Scratch directory for the run (staging area for scaffolding).
        state: Accumulated results; ``relogin_required`` is the OR of what
            the preflight and install stages report.
    """

    def __init__(
        self,
        settings: Settings,
        prompter: Prompter | None = None,
        workdir: Path | None = None,
    ) -> None:
        self.settings = settings
        self.prompter = prompter or RichPrompter()
        self.workdir = workdir
        self.record: ProjectRecord | None = None
        self.state: dict[str, Any] = {
            "stages_completed": [],
            "stages_failed": [],
            "relogin_required": False,
            "success": False,
        }

        self.preflight = PreflightChecker(settings)
        self.installer = DependencyInstaller(settings)
        self.identity = IdentityConfigurator(settings, self.prompter)
        self.scaffolder = ProjectScaffolder(settings)
        self.repository = RepositoryInitializer()
        self.registrar = PluginRegistrar(settings)

    # ------------------------------------------------------------------
    # Stage dispatch
    # ------------------------------------------------------------------

    _STAGE_METHODS: dict[int, str] = {
        1: "stage_preflight",
        2: "stage_collect",
        3: "stage_install",
        4: "stage_identity",
        5: "stage_scaffold",
        6: "stage_repository",
        7: "stage_plugins",
    }

    async def run(self) -> dict[str, Any]:
        """Execute every stage in order.

        Returns:
            The final state dictionary, including a top-level ``success``
            boolean.
        """
        start = time.monotonic()
        print_banner(
            f"devbox-setup v{__version__}",
            "[bold bright_cyan]Claude Code workspace provisioning[/bold bright_cyan]\n"
            f"Projects root : {self.settings.dev_root}",
        )

        all_success = True
        for stage in sorted(self._STAGE_METHODS):
            name = STAGE_NAMES[stage]
            print_stage_header(stage, name)
            try:
                await getattr(self, self._STAGE_METHODS[stage])()
                self.state["stages_completed"].append(stage)
            except StageError as exc:
                all_success = False
                self.state["stages_failed"].append(stage)
                self.state["error"] = str(exc)
                print_error(str(exc))
                # Later stages depend on earlier ones.
                break
            except Exception as exc:
                all_success = False
                self.state["stages_failed"].append(stage)
                self.state["error"] = traceback.format_exc()
                print_error(f"Stage {stage} ({name}) FAILED: {exc}")
                console.print(f"[dim]{self.state['error']}[/dim]")
                break

        self.state["success"] = all_success
        self.state["duration"] = time.monotonic() - start
        if all_success:
            self._print_final_summary()
        return self.state

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def stage_preflight(self) -> None:
        if await self.preflight.run():
            self.state["relogin_required"] = True

    async def stage_collect(self) -> None:
        self.record = collect_project_record(self.prompter, self.settings)

    async def stage_install(self) -> None:
        if await self.installer.run():
            self.state["relogin_required"] = True

    async def stage_identity(self) -> None:
        await self.identity.run(self._require_record())

    async def stage_scaffold(self) -> None:
        self.state["project_dir"] = str(
            self.scaffolder.scaffold(self._require_record(), workdir=self.workdir)
        )

    async def stage_repository(self) -> None:
        self.state["committed"] = await self.repository.run(self._require_record())

    async def stage_plugins(self) -> None:
        report: RegistrationReport = await self.registrar.run(
            self._require_record(), relogin_required=self.state["relogin_required"]
        )
        self.state["plugins"] = report.model_dump()

    def _require_record(self) -> ProjectRecord:
        if self.record is None:
            raise RuntimeError("Project record has not been collected")
        return self.record

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def _print_final_summary(self) -> None:
        record = self._require_record()
        plugins = self.state.get("plugins", {})

        console.print()
        print_success("Setup complete!")
        print_summary_table(
            {
                "Project": record.project_name,
                "Directory": str(record.project_dir),
                "Repository": record.repo_web_url,
                "MCP servers": ", ".join(plugins.get("installed", [])) or "none",
            },
            title="devbox-setup",
        )

        steps = [f"cd '{record.project_dir}'"]
        if self.state["relogin_required"]:
            steps.append("Log out and log back in to activate Docker group membership")
        steps.append("./claude.sh")

        console.print("[bold]Next steps:[/bold]")
        for number, step in enumerate(steps, start=1):
            console.print(f"  {number}. {step}")
        console.print()
        console.print("GitHub authentication is already configured via GitHub CLI.")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _raise_system_exit(signum: int, _frame: Any) -> None:
    raise SystemExit(128 + signum)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``devbox-setup`` / ``python -m devbox.pipeline``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="devbox-setup",
        add_help=False,
        allow_abbrev=False,
        description="Interactive setup for a Claude Code development environment",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Environment:\n"
            "  DEVBOX_DEV_ROOT        Projects root (default: ~/Development)\n"
            "  DEVBOX_MIN_DISK_MB     Required free space in MB (default: 1000)\n"
            "  DEVBOX_DOCKER_WAIT     Readiness probes before giving up (default: 30)\n"
        ),
    )
    parser.add_argument("-h", "--help", action="store_true", help="show this help message and exit")
    parser.add_argument("--version", action="store_true", help="show the version and exit")

    # Only an exact first argument is special; anything else runs the pipeline.
    args = sys.argv[1:] if argv is None else argv
    first = args[0] if args else ""
    if first in ("-h", "--help"):
        parser.print_help()
        sys.exit(0)
    if first == "--version":
        print(f"v{__version__}")
        sys.exit(0)

    settings = Settings.from_env()

    os.umask(0o077)
    signal.signal(signal.SIGTERM, _raise_system_exit)

    exit_code = 1
    try:
        with tempfile.TemporaryDirectory(prefix="devbox-setup-") as workdir:
            pipeline = Pipeline(settings, workdir=Path(workdir))
            result = asyncio.run(pipeline.run())
            exit_code = 0 if result.get("success") else 1
    except KeyboardInterrupt:
        print_error("Interrupted")
        exit_code = 130
    except SystemExit as exc:
        exit_code = exc.code if isinstance(exc.code, int) else 1

    if exit_code != 0:
        print_warning("Setup failed. Check for partially created project directory if needed.")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
