"""Data models for a provisioning run."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from devbox.validators import (
    UNSAFE_CHARACTERS,
    validate_account_handle,
    validate_project_name,
    validate_repository_name,
)


class ProjectRecord(BaseModel):
    """The project described by the user during one run.

    Frozen once built; later stages only read it.  Derived values are
    properties so they can never drift from the fields they come from.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str
    account: str
    repo_name: str
    description: str
    dev_root: Path = Field(default_factory=lambda: Path.home() / "Development")

    @field_validator("project_name")
    @classmethod
    def _check_project_name(cls, value: str) -> str:
        if not validate_project_name(value):
            raise ValueError(f"invalid project name: {value!r}")
        return value

    @field_validator("account")
    @classmethod
    def _check_account(cls, value: str) -> str:
        if not validate_account_handle(value):
            raise ValueError(f"invalid account handle: {value!r}")
        return value

    @field_validator("repo_name")
    @classmethod
    def _check_repo_name(cls, value: str) -> str:
        if not validate_repository_name(value):
            raise ValueError(f"invalid repository name: {value!r}")
        return value

    @field_validator("description")
    @classmethod
    def _check_description(cls, value: str) -> str:
        if any(ch in UNSAFE_CHARACTERS or ch in "\r\n" for ch in value):
            raise ValueError(f"description contains unsafe characters: {value!r}")
        return value

    @property
    def full_repo(self) -> str:
        """``account/repository``."""
        return f"{self.account}/{self.repo_name}"

    @property
    def project_dir(self) -> Path:
        return self.dev_root / self.project_name

    @property
    def remote_url(self) -> str:
        return f"https://github.com/{self.full_repo}.git"

    @property
    def repo_web_url(self) -> str:
        return f"https://github.com/{self.full_repo}"


class McpServer(BaseModel):
    """An MCP server registered inside the provisioned container.

    ``token_env`` lists environment variables that receive the GitHub token
    at registration time; the token itself is never stored.
    """

    name: str
    label: str
    command: list[str]
    token_env: list[str] = Field(default_factory=list)


class RegistrationReport(BaseModel):
    """Outcome of the plugin registration stage."""

    container_ready: bool = True
    installed: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    verified: bool = False
