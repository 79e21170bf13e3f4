"""Tests for repository initialisation (devbox.repository).

Tests cover:
- Command sequence against a fake runner
- Failure of each git step mapped to a stage error
- Idempotency against the real git binary
"""

from __future__ import annotations

import shutil
import subprocess

import pytest

from devbox import __version__
from devbox.errors import StageError
from devbox.repository import COMMIT_MESSAGE, RepositoryInitializer
from devbox.tools import GitClient

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


@pytest.fixture
def project(record):
    record.project_dir.mkdir(parents=True)
    (record.project_dir / "README.md").write_text("# myapp\n", encoding="utf-8")
    return record


# ---------------------------------------------------------------------------
# Fake runner
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestRepositoryCommands:
    async def test_fresh_directory(self, project, runner):
        runner.on("git", "diff", "--cached", "--quiet", returncode=1)
        committed = await RepositoryInitializer(GitClient(runner)).run(project)
        assert committed is True
        assert runner.calls == [
            ["git", "init"],
            ["git", "remote", "add", "origin", "https://github.com/octocat/myapp.git"],
            ["git", "add", "."],
            ["git", "diff", "--cached", "--quiet"],
            ["git", "commit", "-m", COMMIT_MESSAGE.format(version=__version__)],
        ]
        assert all(kw["cwd"] == project.project_dir for kw in runner.call_kwargs)

    async def test_existing_repository_skips_init(self, project, runner):
        (project.project_dir / ".git").mkdir()
        runner.on("git", "diff", "--cached", "--quiet", returncode=1)
        await RepositoryInitializer(GitClient(runner)).run(project)
        assert not runner.called("git", "init")
        assert not runner.called("git", "remote")

    async def test_nothing_staged_no_commit(self, project, runner):
        (project.project_dir / ".git").mkdir()
        committed = await RepositoryInitializer(GitClient(runner)).run(project)
        assert committed is False
        assert not runner.called("git", "commit")

    @pytest.mark.parametrize(
        ("prefix", "message"),
        [
            (("git", "init"), "Failed to initialize Git repository"),
            (("git", "remote", "add"), "Failed to add remote origin"),
            (("git", "add"), "Failed to stage project files"),
            (("git", "diff", "--cached", "--quiet"), "Failed to stage project files"),
            (("git", "commit"), "Failed to create initial commit"),
        ],
    )
    async def test_step_failure_is_fatal(self, project, runner, prefix, message):
        runner.on("git", "diff", "--cached", "--quiet", returncode=1)
        runner.on(*prefix, returncode=128, stderr="fatal: boom")
        with pytest.raises(StageError, match=message) as excinfo:
            await RepositoryInitializer(GitClient(runner)).run(project)
        assert excinfo.value.stage == 6


# ---------------------------------------------------------------------------
# Real git
# ---------------------------------------------------------------------------


@pytest.mark.integration
@requires_git
class TestRepositoryWithGit:
    async def test_first_run_commits(self, project, git_env):
        assert await RepositoryInitializer().run(project) is True
        log = subprocess.run(
            ["git", "log", "--format=%s"],
            cwd=project.project_dir, capture_output=True, text=True, check=True,
        )
        assert log.stdout.strip() == COMMIT_MESSAGE.format(version=__version__)

    async def test_remote_configured(self, project, git_env):
        await RepositoryInitializer().run(project)
        url = subprocess.run(
            ["git", "remote", "get-url", "origin"],
            cwd=project.project_dir, capture_output=True, text=True, check=True,
        )
        assert url.stdout.strip() == "https://github.com/octocat/myapp.git"

    async def test_second_run_adds_no_commit(self, project, git_env):
        initializer = RepositoryInitializer()
        await initializer.run(project)
        assert await initializer.run(project) is False
        count = subprocess.run(
            ["git", "rev-list", "--count", "HEAD"],
            cwd=project.project_dir, capture_output=True, text=True, check=True,
        )
        assert count.stdout.strip() == "1"

    async def test_new_file_committed_on_rerun(self, project, git_env):
        initializer = RepositoryInitializer()
        await initializer.run(project)
        (project.project_dir / "extra.txt").write_text("more\n", encoding="utf-8")
        assert await initializer.run(project) is True
