"""System user and group resources."""

import shlex
from dataclasses import dataclass

from tsi_provision.connector.base import HostConnector
from tsi_provision.resources.base import Resource


@dataclass
class GroupPresent(Resource):
    """A local group exists."""

    name: str
    system: bool = False
    kind = "group"

    def check(self, host: HostConnector) -> bool:
        return host.run(f"getent group {shlex.quote(self.name)}").success

    def apply(self, host: HostConnector) -> None:
        flags = "--system " if self.system else ""
        host.run_checked(f"groupadd {flags}{shlex.quote(self.name)}")

    def describe(self) -> str:
        return f"create group {self.name}"


@dataclass
class UserPresent(Resource):
    """A local user exists with the declared primary group and shell."""

    name: str
    group: str | None = None
    system: bool = False
    shell: str | None = None
    kind = "user"

    def _passwd_entry(self, host: HostConnector) -> list[str] | None:
        result = host.run(f"getent passwd {shlex.quote(self.name)}")
        if not result.success or not result.stdout.strip():
            return None
        return result.stdout.strip().split(":")

    def _primary_group(self, host: HostConnector) -> str:
        return host.run_checked(f"id -gn {shlex.quote(self.name)}").stdout.strip()

    def check(self, host: HostConnector) -> bool:
        entry = self._passwd_entry(host)
        if entry is None:
            return False
        if self.shell is not None and entry[-1] != self.shell:
            return False
        if self.group is not None and self._primary_group(host) != self.group:
            return False
        return True

    def _options(self) -> list[str]:
        opts = []
        if self.group:
            opts.append(f"--gid {shlex.quote(self.group)}")
        if self.shell:
            opts.append(f"--shell {shlex.quote(self.shell)}")
        return opts

    def apply(self, host: HostConnector) -> None:
        if self._passwd_entry(host) is None:
            parts = ["useradd", *(["--system"] if self.system else []), *self._options()]
        else:
            parts = ["usermod", *self._options()]
        host.run_checked(" ".join([*parts, shlex.quote(self.name)]))

    def describe(self) -> str:
        return f"create user {self.name}"
