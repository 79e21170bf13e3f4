"""End-to-end scaffolding: generate a project and check the files parse.

Tests cover:
- docker-compose.yml is valid YAML with the hardened service definition
- devcontainer.json is valid JSON and agrees with the Compose file
- claude.sh is valid bash and sourcing .env works with a quoted description
- .env parses as a dotenv file (what docker compose reads) with every key intact
- Scaffold + repository stages together produce exactly one commit
"""

from __future__ import annotations

import json
import shutil
import subprocess

import pytest
import yaml
from dotenv import dotenv_values

from devbox.models import ProjectRecord
from devbox.repository import RepositoryInitializer
from devbox.scaffolder import ProjectScaffolder

pytestmark = pytest.mark.integration

requires_bash = pytest.mark.skipif(shutil.which("bash") is None, reason="bash not installed")
requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


@pytest.fixture
def project(settings):
    record = ProjectRecord(
        project_name="my_app-2",
        account="octo-cat",
        repo_name="my-app",
        description="It's a \"quoted\" project",
        dev_root=settings.dev_root,
    )
    ProjectScaffolder(settings).scaffold(record)
    return record


class TestComposeFile:
    def test_service_definition(self, project):
        compose = yaml.safe_load((project.project_dir / "docker-compose.yml").read_text(encoding="utf-8"))
        service = compose["services"]["claude-code"]
        assert service["container_name"] == "claude-code-my_app-2"
        assert service["cap_drop"] == ["ALL"]
        assert service["security_opt"] == ["no-new-privileges:true"]
        assert "GITHUB_TOKEN=${GITHUB_TOKEN}" in service["environment"]
        assert "./:/workspace" in service["volumes"]

    def test_named_volume_declared(self, project):
        compose = yaml.safe_load((project.project_dir / "docker-compose.yml").read_text(encoding="utf-8"))
        assert compose["volumes"]["claude-code-auth-my_app-2"]["name"] == "claude-code-auth-my_app-2"


class TestDevcontainer:
    def test_agrees_with_compose(self, project):
        devcontainer = json.loads(
            (project.project_dir / ".devcontainer" / "devcontainer.json").read_text(encoding="utf-8")
        )
        compose = yaml.safe_load((project.project_dir / "docker-compose.yml").read_text(encoding="utf-8"))
        home = f"/home/{devcontainer['remoteUser']}"
        service = compose["services"]["claude-code"]
        assert f"HOME={home}" in service["environment"]
        assert f"claude-code-auth-my_app-2:{home}/.claude" in service["volumes"]
        assert f"~/.gitconfig:{home}/.gitconfig:ro" in service["volumes"]


class TestEnvFile:
    def test_dotenv_round_trip(self, project):
        values = dotenv_values(project.project_dir / ".env")
        assert values["PROJECT_DESCRIPTION"] == "It's a \"quoted\" project"
        assert values["PROJECT_NAME"] == "my_app-2"
        assert values["GITHUB_REPO"] == "octo-cat/my-app"
        assert set(values) == {
            "PROJECT_NAME", "GITHUB_REPO", "GITHUB_URL", "PROJECT_DESCRIPTION", "USER_ID", "GID",
        }

    def test_single_quote_alone(self, settings):
        record = ProjectRecord(
            project_name="bobs-app", account="bob", repo_name="bobs-app",
            description="Bob's app", dev_root=settings.dev_root,
        )
        ProjectScaffolder(settings).scaffold(record)
        values = dotenv_values(record.project_dir / ".env")
        assert values["PROJECT_DESCRIPTION"] == "Bob's app"


@requires_bash
class TestShellFiles:
    def test_script_parses(self, project):
        result = subprocess.run(
            ["bash", "-n", str(project.project_dir / "claude.sh")],
            capture_output=True, text=True,
        )
        assert result.returncode == 0, result.stderr

    def test_env_file_sources(self, project):
        result = subprocess.run(
            ["bash", "-c", "set -a; source .env; printf '%s' \"$PROJECT_DESCRIPTION\""],
            cwd=project.project_dir, capture_output=True, text=True,
        )
        assert result.returncode == 0, result.stderr
        assert result.stdout == "It's a \"quoted\" project"

    def test_usage_branch(self, project):
        result = subprocess.run(
            ["bash", str(project.project_dir / "claude.sh"), "help"],
            capture_output=True, text=True,
        )
        assert result.returncode == 0, result.stderr
        assert "Commands: run, shell, stop, logs, clean, setup-mcp" in result.stdout


@requires_git
class TestScaffoldAndCommit:
    async def test_single_commit_after_two_runs(self, project, git_env):
        initializer = RepositoryInitializer()
        assert await initializer.run(project) is True
        assert await initializer.run(project) is False
        count = subprocess.run(
            ["git", "rev-list", "--count", "HEAD"],
            cwd=project.project_dir, capture_output=True, text=True, check=True,
        )
        assert count.stdout.strip() == "1"
        tracked = subprocess.run(
            ["git", "ls-files"],
            cwd=project.project_dir, capture_output=True, text=True, check=True,
        ).stdout.split()
        assert ".env" not in tracked
        assert "claude.sh" in tracked
