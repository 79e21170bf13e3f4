"""Common plumbing for the external-tool clients."""

from __future__ import annotations

from pathlib import Path

from devbox.utils import CommandRunner, run_command


class CommandError(Exception):
    """Raised when a checked external command exits non-zero."""

    def __init__(self, message: str, command: str = "", stderr: str = "") -> None:
        self.command = command
        self.stderr = stderr
        super().__init__(message)


class ToolClient:
    """Base class for a narrow wrapper around one external program.

    Subclasses prefix every call with :attr:`program`.  The *runner* is
    ``run_command`` in production and a recording fake in tests.
    """

    program: tuple[str, ...] = ()

    def __init__(self, runner: CommandRunner | None = None) -> None:
        self.runner: CommandRunner = runner or run_command

    async def _run(
        self,
        *args: str,
        cwd: str | Path | None = None,
        timeout: float | None = 120,
        capture: bool = True,
        env: dict[str, str] | None = None,
    ) -> tuple[int, str, str]:
        cmd = [*self.program, *args]
        return await self.runner(cmd, cwd=cwd, timeout=timeout, capture=capture, env=env)

    async def _succeeds(self, *args: str, **kwargs) -> bool:
        returncode, _, _ = await self._run(*args, **kwargs)
        return returncode == 0

    async def _check(self, *args: str, **kwargs) -> str:
        """Run a command and return its stdout, raising ``CommandError`` on failure."""
        returncode, stdout, stderr = await self._run(*args, **kwargs)
        if returncode != 0:
            cmd_str = " ".join([*self.program, *args])
            raise CommandError(
                f"Command failed (exit {returncode}): {cmd_str}"
                + (f"\n{stderr}" if stderr else ""),
                command=cmd_str,
                stderr=stderr,
            )
        return stdout
