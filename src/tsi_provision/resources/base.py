"""Resource plugin surface.

A resource is one declared piece of host state. It only knows how to
tell whether the host already matches (``check``) and how to make it
match (``apply``). Ordering and notifications belong to the runner.
"""

import shlex
from abc import ABC, abstractmethod
from dataclasses import dataclass

from tsi_provision.connector.base import HostConnector


class Resource(ABC):
    """Abstract base class for all declared states."""

    kind: str = "resource"

    @abstractmethod
    def check(self, host: HostConnector) -> bool:
        """Return True when the host already matches the declared state."""
        ...

    @abstractmethod
    def apply(self, host: HostConnector) -> None:
        """Change the host to match. Raise on failure."""
        ...

    @abstractmethod
    def describe(self) -> str:
        """Short imperative description, e.g. 'install nginx'."""
        ...


@dataclass(frozen=True)
class PathStat:
    """Type, ownership and permission bits of a path."""

    file_type: str  # "regular file", "directory", "symbolic link", ...
    owner: str
    group: str
    mode: str  # octal without leading zeros, as printed by stat %a

    def matches(self, owner: str | None, group: str | None, mode: str | None) -> bool:
        if owner is not None and self.owner != owner:
            return False
        if group is not None and self.group != group:
            return False
        if mode is not None and self.mode != normalize_mode(mode):
            return False
        return True


def normalize_mode(mode: str) -> str:
    """'0755' -> '755', the way stat %a prints it."""
    return mode.lstrip("0") or "0"


def stat_path(host: HostConnector, path: str) -> PathStat | None:
    """Stat a path without following symlinks, None when absent."""
    result = host.run(f"stat -c '%F|%U|%G|%a' {shlex.quote(path)}")
    if not result.success:
        return None
    parts = result.stdout.strip().split("|")
    if len(parts) != 4:
        return None
    return PathStat(file_type=parts[0], owner=parts[1], group=parts[2], mode=parts[3])


def sha256_of(host: HostConnector, path: str) -> str | None:
    """sha256 hex digest of a file on the host, None when unreadable."""
    result = host.run(f"sha256sum {shlex.quote(path)}")
    if not result.success or not result.stdout.strip():
        return None
    return result.stdout.split()[0]


def set_attributes(
    host: HostConnector,
    path: str,
    owner: str | None = None,
    group: str | None = None,
    mode: str | None = None,
) -> None:
    """chown/chmod a path, skipping whatever is not declared."""
    quoted = shlex.quote(path)
    if owner is not None or group is not None:
        spec = f"{owner or ''}:{group or ''}" if group else owner
        host.run_checked(f"chown {shlex.quote(spec)} {quoted}")
    if mode is not None:
        host.run_checked(f"chmod {mode} {quoted}")
