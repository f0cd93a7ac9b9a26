"""Arbitrary shell commands with an optional idempotency guard."""

from dataclasses import dataclass

from tsi_provision.connector.base import HostConnector
from tsi_provision.resources.base import Resource


@dataclass
class CommandRun(Resource):
    """Run ``command`` unless ``creates`` already exists.

    Without a ``creates`` marker the command runs every time and always
    counts as a change. A non-zero exit is a failure.
    """

    command: str
    creates: str | None = None
    kind = "command"

    def check(self, host: HostConnector) -> bool:
        if self.creates is None:
            return False
        return host.path_exists(self.creates)

    def apply(self, host: HostConnector) -> None:
        host.run_checked(self.command)

    def describe(self) -> str:
        return "run " + " ".join(self.command.split()[:2])
