"""Connector package - how commands reach the target host."""

from tsi_provision.connector.base import CommandResult, HostConnector
from tsi_provision.connector.local import LocalConnector
from tsi_provision.connector.ssh import SSHConfig, SSHConnector

__all__ = [
    "CommandResult",
    "HostConnector",
    "LocalConnector",
    "SSHConfig",
    "SSHConnector",
]
