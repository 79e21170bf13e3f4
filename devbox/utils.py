"""Shared utility functions for devbox-setup.

Provides async command execution, Rich-based console reporting, and a
bounded-retry polling primitive used for readiness checks.  Every stage
prints through the helpers here so the colour scheme stays consistent.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Protocol

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table

console = Console()
err_console = Console(stderr=True)

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


class CommandRunner(Protocol):
    """Callable signature shared by ``run_command`` and test doubles."""

    async def __call__(
        self,
        cmd: list[str],
        cwd: str | Path | None = None,
        timeout: float | None = 120,
        capture: bool = True,
        env: dict[str, str] | None = None,
    ) -> tuple[int, str, str]: ...


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: float | None = 120,
    capture: bool = True,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run an external program asynchronously.

    Commands are always executed without a shell, so values taken from the
    project record never cross a shell-interpretation boundary.

    Args:
        cmd: Program and arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
            ``None`` waits indefinitely (interactive logins, system upgrades).
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams so the user sees and answers prompts).
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  A missing executable is
        reported as returncode 127, a timeout as -1.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    stdout_pipe = asyncio.subprocess.PIPE if capture else None
    stderr_pipe = asyncio.subprocess.PIPE if capture else None

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=stdout_pipe,
            stderr=stderr_pipe,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )
    except FileNotFoundError:
        return (127, "", f"Command not found: {cmd[0]}")

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (-1, "", f"Command timed out after {timeout}s: {' '.join(cmd)}")

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


# ---------------------------------------------------------------------------
# Readiness polling
# ---------------------------------------------------------------------------


async def wait_until(
    probe: Callable[[], Awaitable[bool]],
    retries: int = 30,
    interval: float = 1.0,
) -> bool:
    """Poll *probe* at a fixed interval until it returns ``True``.

    Args:
        probe: Async predicate, e.g. "does ``docker info`` succeed".
        retries: Maximum number of probe attempts.
        interval: Seconds to sleep between failed attempts.

    Returns:
        ``True`` as soon as the probe succeeds, ``False`` once *retries*
        attempts have failed.
    """
    for attempt in range(retries):
        if await probe():
            return True
        if attempt < retries - 1:
            await asyncio.sleep(interval)
    return False


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


STAGE_NAMES: dict[int, str] = {
    1: "PREFLIGHT",
    2: "COLLECT",
    3: "INSTALL",
    4: "IDENTITY",
    5: "SCAFFOLD",
    6: "REPOSITORY",
    7: "PLUGINS",
}

STAGE_COLORS: dict[int, str] = {
    1: "bright_cyan",
    2: "bright_green",
    3: "bright_yellow",
    4: "bright_magenta",
    5: "bright_blue",
    6: "bright_white",
    7: "bright_red",
}


def print_stage_header(stage: int, name: str) -> None:
    """Print a full-width rule announcing a pipeline stage."""
    color = STAGE_COLORS.get(stage, "white")
    console.print()
    console.print(
        Rule(
            f"[bold {color}] Stage {stage}: {name.upper()} [/bold {color}]",
            style=color,
        )
    )
    console.print()


def print_banner(title: str, body: str) -> None:
    """Print the start-of-run banner."""
    console.print(
        Panel(
            body,
            title=f"[bold]{title}[/bold]",
            border_style="bright_cyan",
        )
    )


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_info(message: str) -> None:
    """Print a blue informational message."""
    console.print(f"[bold blue]i[/bold blue] {escape(message)}")


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]+ {escape(message)}[/bold green]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]! {escape(message)}[/bold yellow]")


def print_error(message: str) -> None:
    """Print a red error message to stderr."""
    err_console.print(f"[bold red]x {escape(message)}[/bold red]")
