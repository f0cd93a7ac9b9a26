"""SSH Connector - Connection to the remote target host.

This module handles all SSH communication with the host being
provisioned. Commands are run through sudo unless the connection logs in
as root.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import paramiko
from paramiko.ssh_exception import AuthenticationException, SSHException

from tsi_provision.connector.base import CommandResult, HostConnector

logger = logging.getLogger(__name__)


@dataclass
class SSHConfig:
    """SSH connection configuration."""

    host: str
    user: str = "root"
    port: int = 22
    key_path: str | None = None
    password: str | None = None  # Fallback, prefer keys
    use_sudo: bool = True
    timeout: int = 30  # connect only; commands run until they finish


class SSHConnector(HostConnector):
    """SSH connection manager for provisioning a remote host.

    Example:
        >>> config = SSHConfig(host="192.168.1.100", user="deploy")
        >>> with SSHConnector(config) as ssh:
        ...     result = ssh.run("nginx -v")
        ...     print(result.stderr)
    """

    def __init__(self, config: SSHConfig) -> None:
        """Initialize SSH connector with configuration."""
        self.config = config
        self.name = config.host
        self._client: paramiko.SSHClient | None = None

    def connect(self) -> None:
        """Establish SSH connection."""
        self._client = paramiko.SSHClient()
        self._client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        connect_kwargs: dict = {
            "hostname": self.config.host,
            "port": self.config.port,
            "username": self.config.user,
            "timeout": self.config.timeout,
        }

        # Prefer key-based authentication
        if self.config.key_path:
            key_path = Path(self.config.key_path).expanduser()
            if key_path.exists():
                connect_kwargs["key_filename"] = str(key_path)
        elif self.config.password:
            connect_kwargs["password"] = self.config.password

        logger.debug("Connecting to %s@%s:%s", self.config.user, self.config.host, self.config.port)
        try:
            self._client.connect(**connect_kwargs)
        except AuthenticationException as e:
            raise ConnectionError(f"Authentication failed: {e}") from e
        except SSHException as e:
            raise ConnectionError(f"SSH error: {e}") from e

    def disconnect(self) -> None:
        """Close SSH connection."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "SSHConnector":
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.disconnect()

    def _wrap_sudo(self, command: str) -> str:
        if not self.config.use_sudo or self.config.user == "root":
            return command
        quoted = command.replace("'", "'\"'\"'")
        if self.config.password:
            # -S reads the password from stdin
            return f"echo '{self.config.password}' | sudo -S sh -c '{quoted}'"
        return f"sudo sh -c '{quoted}'"

    def run(self, command: str) -> CommandResult:
        """Execute a command on the remote server.

        Args:
            command: The shell command to execute.

        Returns:
            CommandResult with stdout, stderr, and exit_code.
        """
        if not self._client:
            raise RuntimeError("Not connected. Use 'with SSHConnector(config):' context.")

        logger.debug("[%s] $ %s", self.name, command)
        try:
            _, stdout, stderr = self._client.exec_command(self._wrap_sudo(command))
            exit_code = stdout.channel.recv_exit_status()
        except SSHException as e:
            raise ConnectionError(f"SSH error while running '{command}': {e}") from e

        return CommandResult(
            command=command,
            stdout=stdout.read().decode("utf-8", errors="replace"),
            stderr=stderr.read().decode("utf-8", errors="replace"),
            exit_code=exit_code,
        )
