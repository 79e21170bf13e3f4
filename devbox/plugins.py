"""MCP server registration inside the provisioned container.

This stage is best-effort: once the container has been asked to start, a slow
readiness probe, a failed registration or a failed verification are reported
as warnings and the run still succeeds.
"""

from __future__ import annotations

from devbox.config import Settings
from devbox.errors import StageError
from devbox.models import McpServer, ProjectRecord, RegistrationReport
from devbox.tools import CommandError, DockerClient, GitHubClient
from devbox.utils import print_info, print_success, print_warning, wait_until

PLUGINS_STAGE = 7

CLAUDE_CMD = ("claude", "--dangerously-skip-permissions")


def mcp_add_args(server: McpServer, token: str | None) -> list[str]:
    """Build the ``claude mcp add`` argv for one server."""
    args = [*CLAUDE_CMD, "mcp", "add", server.name]
    for var in server.token_env:
        args += ["-e", f"{var}={token or ''}"]
    return [*args, "--", *server.command]


class PluginRegistrar:
    """Starts the project container if needed and registers MCP servers."""

    def __init__(
        self,
        settings: Settings,
        github: GitHubClient | None = None,
        docker: DockerClient | None = None,
    ) -> None:
        self.settings = settings
        self.github = github or GitHubClient()
        self.docker = docker

    def _docker_for(self, record: ProjectRecord, use_sudo: bool) -> DockerClient:
        if self.docker is not None:
            return self.docker
        return DockerClient(project_dir=record.project_dir, use_sudo=use_sudo)

    async def run(self, record: ProjectRecord, relogin_required: bool = False) -> RegistrationReport:
        """Register every configured MCP server.

        Args:
            record: The scaffolded project.
            relogin_required: Docker group membership is not active yet, so
                ``docker`` must be run through ``sudo``.

        Raises:
            StageError: Only if ``docker compose up`` itself fails.
        """
        print_info("Setting up MCP servers...")
        docker = self._docker_for(record, relogin_required)
        service = self.settings.container.service_name
        report = RegistrationReport()

        if not await docker.service_running(service):
            report.container_ready = await self.start_container(docker, service)

        token = await self.github.token()

        for server in self.settings.mcp_servers:
            print_info(f"Installing {server.label}...")
            if await docker.exec_ok(service, *mcp_add_args(server, token)):
                print_success(f"{server.label} installed")
                report.installed.append(server.name)
            else:
                print_warning(f"{server.label} installation failed - continuing")
                report.failed.append(server.name)

        print_info("Verifying MCP server installation...")
        report.verified = await docker.exec_ok(service, *CLAUDE_CMD, "mcp", "list")
        if report.verified:
            print_success("MCP servers configured successfully")
        else:
            print_warning(
                "MCP server verification failed - check manually with "
                "'claude --dangerously-skip-permissions mcp list'"
            )
        return report

    async def start_container(self, docker: DockerClient, service: str) -> bool:
        """Bring the service up and wait for it; a timeout is only a warning."""
        print_info("Building and starting container for MCP setup...")
        token = await self.github.token()
        env = {"GITHUB_TOKEN": token} if token else None
        try:
            await docker.up(service, env=env)
        except CommandError as exc:
            raise StageError(PLUGINS_STAGE, f"Failed to start container: {exc}") from exc

        ready = await wait_until(
            lambda: docker.ready(service),
            retries=self.settings.docker_wait_timeout,
            interval=self.settings.poll_interval,
        )
        if not ready:
            print_warning("Container startup timeout - MCP setup may fail")
        return ready
