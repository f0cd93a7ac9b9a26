"""Resource package - declared host states with check/apply pairs.

Resources run shell commands through a HostConnector. They never decide
ordering or notifications; that is the runner's job.
"""

from tsi_provision.resources.accounts import GroupPresent, UserPresent
from tsi_provision.resources.archives import ArchiveExtracted, UrlDownloaded
from tsi_provision.resources.base import Resource
from tsi_provision.resources.commands import CommandRun
from tsi_provision.resources.files import (
    DirectoryPresent,
    FileContent,
    FileCopied,
    PathAbsent,
    SymlinkPresent,
)
from tsi_provision.resources.firewall import FirewallEnabled, FirewallRuleAllowed
from tsi_provision.resources.packages import PackageCacheUpdated, PackagePresent
from tsi_provision.resources.services import ServiceState, SystemdDaemonReloaded

__all__ = [
    "ArchiveExtracted",
    "CommandRun",
    "DirectoryPresent",
    "FileContent",
    "FileCopied",
    "FirewallEnabled",
    "FirewallRuleAllowed",
    "GroupPresent",
    "PackageCacheUpdated",
    "PackagePresent",
    "PathAbsent",
    "Resource",
    "ServiceState",
    "SymlinkPresent",
    "SystemdDaemonReloaded",
    "UrlDownloaded",
]
