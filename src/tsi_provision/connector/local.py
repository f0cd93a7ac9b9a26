"""Local Connector - provision the machine the tool is running on."""

import logging
import subprocess

from tsi_provision.connector.base import CommandResult, HostConnector

logger = logging.getLogger(__name__)


class LocalConnector(HostConnector):
    """Runs commands through /bin/sh on the local machine.

    Privileges are whatever the invoking user has; run the tool as root
    (or under sudo) for a real provisioning run.
    """

    def __init__(self, name: str = "localhost") -> None:
        self.name = name

    def run(self, command: str) -> CommandResult:
        logger.debug("[%s] $ %s", self.name, command)
        # Output must keep \r\n intact, so no text mode
        proc = subprocess.run(command, shell=True, capture_output=True)
        return CommandResult(
            command=command,
            stdout=proc.stdout.decode("utf-8", errors="replace"),
            stderr=proc.stderr.decode("utf-8", errors="replace"),
            exit_code=proc.returncode,
        )
