"""Capability clients wrapping the external programs the pipeline drives."""

from devbox.tools.base import CommandError, ToolClient
from devbox.tools.docker import DockerClient
from devbox.tools.git import GitClient
from devbox.tools.github import GitHubClient
from devbox.tools.packages import PackageManager
from devbox.tools.system import SystemClient

__all__ = [
    "CommandError",
    "DockerClient",
    "GitClient",
    "GitHubClient",
    "PackageManager",
    "SystemClient",
    "ToolClient",
]
