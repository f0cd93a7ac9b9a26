"""Host connector surface shared by SSH and local execution.

Every resource talks to the target host through this interface only.
``run`` is the single primitive a connector has to provide; file helpers
are built on top of it so both connectors behave identically.
"""

import base64
import logging
import shlex
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Result of a command execution."""

    command: str
    stdout: str
    stderr: str
    exit_code: int
    success: bool = field(init=False)

    def __post_init__(self) -> None:
        self.success = self.exit_code == 0

    @property
    def output(self) -> str:
        """Combined output, stderr first when the command failed."""
        if self.success:
            return self.stdout.strip()
        return (self.stderr.strip() or self.stdout.strip())


class HostConnector(ABC):
    """Abstract connection to the single target host."""

    name: str = "host"

    @abstractmethod
    def run(self, command: str) -> CommandResult:
        """Execute a shell command on the host and wait for it to finish."""

    def run_checked(self, command: str) -> CommandResult:
        """Execute a command, raising CommandError on a non-zero exit."""
        from tsi_provision.engine.errors import CommandError

        result = self.run(command)
        if not result.success:
            raise CommandError(result)
        return result

    def __enter__(self) -> "HostConnector":
        return self

    def __exit__(self, *args: object) -> None:
        return None

    def read_file(self, path: str) -> str | None:
        """Read file contents, or None if the file doesn't exist."""
        result = self.run(f"cat {shlex.quote(path)}")
        if result.success:
            return result.stdout
        return None

    def file_exists(self, path: str) -> bool:
        """Check if a regular file exists."""
        return self.run(f"test -f {shlex.quote(path)}").success

    def dir_exists(self, path: str) -> bool:
        """Check if a directory exists."""
        return self.run(f"test -d {shlex.quote(path)}").success

    def path_exists(self, path: str) -> bool:
        """Check if anything, including a dangling symlink, lives at path."""
        quoted = shlex.quote(path)
        return self.run(f"test -e {quoted} || test -L {quoted}").success

    def write_file(self, path: str, content: str) -> None:
        """Write content to path atomically.

        Content travels base64-encoded to avoid shell escaping issues and
        lands in a sibling temp file that is then moved over the target.
        """
        encoded = base64.b64encode(content.encode()).decode()
        temp_path = f"{path}.tsi-tmp"
        logger.debug("Writing %d bytes to %s", len(content), path)
        self.run_checked(
            f"printf '%s' '{encoded}' | base64 -d > {shlex.quote(temp_path)}"
            f" && mv -f {shlex.quote(temp_path)} {shlex.quote(path)}"
        )
