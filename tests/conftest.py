"""Shared pytest fixtures for the devbox-setup test suite.

Provides reusable fixtures for:
- A recording fake command runner with scripted results
- A scripted prompter replaying user answers
- Settings pointing at a temporary development root
- A valid project record
- An isolated git environment for tests that call the real git binary
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from devbox.config import Settings
from devbox.models import ProjectRecord


# ---------------------------------------------------------------------------
# Fake command runner
# ---------------------------------------------------------------------------

Result = tuple[int, str, str]


class FakeRunner:
    """Records every command and answers from scripted rules.

    Rules match on a command prefix; the longest matching prefix wins and a
    rule with several results returns them in order, repeating the last one.
    Unmatched commands succeed with empty output.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.call_kwargs: list[dict[str, Any]] = []
        self._rules: list[tuple[tuple[str, ...], list[Result]]] = []

    def on(
        self,
        *prefix: str,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        results: list[Result] | None = None,
    ) -> "FakeRunner":
        self._rules.append((prefix, list(results) if results else [(returncode, stdout, stderr)]))
        return self

    async def __call__(
        self,
        cmd: list[str],
        cwd: str | Path | None = None,
        timeout: float | None = 120,
        capture: bool = True,
        env: dict[str, str] | None = None,
    ) -> Result:
        self.calls.append(list(cmd))
        self.call_kwargs.append({"cwd": cwd, "timeout": timeout, "capture": capture, "env": env})

        best: list[Result] | None = None
        best_len = -1
        for prefix, results in self._rules:
            if tuple(cmd[: len(prefix)]) == prefix and len(prefix) >= best_len:
                best, best_len = results, len(prefix)
        if best is None:
            return (0, "", "")
        return best.pop(0) if len(best) > 1 else best[0]

    def count(self, *prefix: str) -> int:
        return sum(1 for call in self.calls if tuple(call[: len(prefix)]) == prefix)

    def called(self, *prefix: str) -> bool:
        return self.count(*prefix) > 0

    def find(self, *prefix: str) -> list[list[str]]:
        return [call for call in self.calls if tuple(call[: len(prefix)]) == prefix]


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


# ---------------------------------------------------------------------------
# Scripted prompter
# ---------------------------------------------------------------------------


class ScriptedPrompter:
    """Replays answers in order and records what was asked."""

    def __init__(self, answers: list[str] | None = None, confirms: list[bool] | None = None) -> None:
        self.answers = list(answers or [])
        self.confirms = list(confirms or [])
        self.asked: list[str] = []
        self.confirmed: list[tuple[str, bool]] = []

    def ask(self, text: str) -> str:
        self.asked.append(text)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {text}")
        return self.answers.pop(0)

    def confirm(self, text: str, default: bool = False) -> bool:
        self.confirmed.append((text, default))
        if not self.confirms:
            return default
        return self.confirms.pop(0)


@pytest.fixture
def prompter() -> ScriptedPrompter:
    return ScriptedPrompter()


# ---------------------------------------------------------------------------
# Settings & record
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings rooted in tmp_path with readiness polling shrunk to zero."""
    marker = tmp_path / "arch-release"
    marker.write_text("", encoding="utf-8")
    return Settings(
        dev_root=tmp_path / "Development",
        release_marker=marker,
        docker_wait_timeout=3,
        poll_interval=0,
    )


@pytest.fixture
def record(settings: Settings) -> ProjectRecord:
    return ProjectRecord(
        project_name="myapp",
        account="octocat",
        repo_name="myapp",
        description="A test project",
        dev_root=settings.dev_root,
    )


# ---------------------------------------------------------------------------
# Real git
# ---------------------------------------------------------------------------


@pytest.fixture
def git_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Isolate git from the developer's global and system configuration."""
    global_config = tmp_path / "gitconfig"
    global_config.write_text(
        "[user]\n\tname = Devbox Test\n\temail = test@devbox.local\n"
        "[commit]\n\tgpgsign = false\n"
        "[init]\n\tdefaultBranch = main\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
