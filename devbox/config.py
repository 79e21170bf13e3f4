"""devbox-setup configuration.

Typed configuration for the provisioning pipeline.  All settings use Pydantic
v2 models so they are validated at construction time; tests build a
``Settings`` pointing at ``tmp_path`` with polling shrunk to zero.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from devbox.models import McpServer


# Registered in this order; the management script renders the same list.
DEFAULT_MCP_SERVERS: tuple[McpServer, ...] = (
    McpServer(
        name="github",
        label="GitHub MCP server",
        command=[
            "docker", "run", "-i", "--rm", "-e", "GITHUB_PERSONAL_ACCESS_TOKEN",
            "ghcr.io/github/github-mcp-server",
        ],
        token_env=["GITHUB_PERSONAL_ACCESS_TOKEN"],
    ),
    McpServer(
        name="git",
        label="Git MCP server",
        command=["npx", "-y", "mcp-server-git", "--repository", "/workspace"],
    ),
    McpServer(
        name="shadcn-ui-server",
        label="shadcn/ui MCP server",
        command=["npx", "-y", "shadcn-ui-mcp-server"],
    ),
)


class ContainerConfig(BaseModel):
    """Everything the generated container files agree on.

    ``remote_user`` is the single source for the in-container account: the
    Dockerfile ``USER``, the devcontainer ``remoteUser`` and every home-relative
    mount target are derived from it.
    """

    service_name: str = Field(default="claude-code")
    remote_user: str = Field(default="node")
    base_image: str = Field(default="node:20-slim")
    npm_package: str = Field(default="@anthropic-ai/claude-code")
    workspace: str = Field(default="/workspace")

    @property
    def home(self) -> str:
        """Home directory of ``remote_user`` inside the container."""
        return f"/home/{self.remote_user}"

    def container_name(self, project_name: str) -> str:
        return f"{self.service_name}-{project_name}"

    def auth_volume(self, project_name: str) -> str:
        return f"{self.service_name}-auth-{project_name}"


class Settings(BaseModel):
    """Global devbox-setup configuration.

    Instances are created once by the CLI entry point (normally via
    :meth:`from_env`) and passed to every stage.
    """

    dev_root: Path = Field(default_factory=lambda: Path.home() / "Development")

    # Preflight
    min_disk_space_mb: int = Field(default=1000, ge=0)
    network_timeout: float = Field(default=15.0, gt=0, description="Reachability timeout in seconds")
    network_check_url: str = Field(default="https://github.com")
    release_marker: Path = Field(default=Path("/etc/arch-release"))
    required_tools: list[str] = Field(default_factory=lambda: ["curl"])

    # Readiness polling
    docker_wait_timeout: int = Field(
        default=30, ge=1, description="Maximum readiness probes before giving up"
    )
    poll_interval: float = Field(default=1.0, ge=0, description="Seconds between readiness probes")

    # Installation
    packages: list[str] = Field(
        default_factory=lambda: ["docker", "github-cli", "git", "curl"]
    )
    docker_group: str = Field(default="docker")

    # Identity
    github_scopes: list[str] = Field(
        default_factory=lambda: ["repo", "read:org", "workflow"]
    )
    default_branch: str = Field(default="main")
    default_description: str = Field(default="A project built with Claude Code")

    container: ContainerConfig = Field(default_factory=ContainerConfig)
    mcp_servers: list[McpServer] = Field(
        default_factory=lambda: [s.model_copy(deep=True) for s in DEFAULT_MCP_SERVERS]
    )

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            DEVBOX_DEV_ROOT, DEVBOX_MIN_DISK_MB, DEVBOX_NETWORK_TIMEOUT,
            DEVBOX_DOCKER_WAIT, DEVBOX_POLL_INTERVAL, DEVBOX_CONTAINER_USER.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("DEVBOX_DEV_ROOT"):
            kwargs["dev_root"] = Path(os.environ["DEVBOX_DEV_ROOT"]).expanduser()
        if os.environ.get("DEVBOX_MIN_DISK_MB"):
            kwargs["min_disk_space_mb"] = int(os.environ["DEVBOX_MIN_DISK_MB"])
        if os.environ.get("DEVBOX_NETWORK_TIMEOUT"):
            kwargs["network_timeout"] = float(os.environ["DEVBOX_NETWORK_TIMEOUT"])
        if os.environ.get("DEVBOX_DOCKER_WAIT"):
            kwargs["docker_wait_timeout"] = int(os.environ["DEVBOX_DOCKER_WAIT"])
        if os.environ.get("DEVBOX_POLL_INTERVAL"):
            kwargs["poll_interval"] = float(os.environ["DEVBOX_POLL_INTERVAL"])

        container_kwargs: dict[str, Any] = {}
        if os.environ.get("DEVBOX_CONTAINER_USER"):
            container_kwargs["remote_user"] = os.environ["DEVBOX_CONTAINER_USER"]

        return cls(container=ContainerConfig(**container_kwargs), **kwargs)

    @property
    def scopes_arg(self) -> str:
        """Scopes joined the way ``gh auth login --scopes`` expects them."""
        return ",".join(self.github_scopes)
