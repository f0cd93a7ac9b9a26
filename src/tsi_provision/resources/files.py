"""Filesystem resources: directories, file content, copies, links."""

import shlex
from dataclasses import dataclass

from tsi_provision.connector.base import HostConnector
from tsi_provision.resources.base import (
    Resource,
    set_attributes,
    sha256_of,
    stat_path,
)


@dataclass
class DirectoryPresent(Resource):
    """A directory exists with the declared owner, group and mode."""

    path: str
    owner: str | None = None
    group: str | None = None
    mode: str | None = None
    kind = "directory"

    def check(self, host: HostConnector) -> bool:
        stat = stat_path(host, self.path)
        if stat is None or stat.file_type != "directory":
            return False
        return stat.matches(self.owner, self.group, self.mode)

    def apply(self, host: HostConnector) -> None:
        host.run_checked(f"mkdir -p {shlex.quote(self.path)}")
        set_attributes(host, self.path, self.owner, self.group, self.mode)

    def describe(self) -> str:
        return f"create directory {self.path}"


@dataclass
class FileContent(Resource):
    """A regular file holds exactly ``content``."""

    path: str
    content: str
    owner: str | None = None
    group: str | None = None
    mode: str | None = None
    kind = "file"

    def check(self, host: HostConnector) -> bool:
        stat = stat_path(host, self.path)
        if stat is None or stat.file_type not in ("regular file", "regular empty file"):
            return False
        if host.read_file(self.path) != self.content:
            return False
        return stat.matches(self.owner, self.group, self.mode)

    def apply(self, host: HostConnector) -> None:
        host.write_file(self.path, self.content)
        set_attributes(host, self.path, self.owner, self.group, self.mode)

    def describe(self) -> str:
        return f"write {self.path}"


@dataclass
class FileCopied(Resource):
    """``dest`` is a copy of ``src``, both on the target host."""

    src: str
    dest: str
    owner: str | None = None
    group: str | None = None
    mode: str | None = None
    kind = "copy"

    def check(self, host: HostConnector) -> bool:
        stat = stat_path(host, self.dest)
        if stat is None or not stat.matches(self.owner, self.group, self.mode):
            return False
        source_digest = sha256_of(host, self.src)
        return source_digest is not None and source_digest == sha256_of(host, self.dest)

    def apply(self, host: HostConnector) -> None:
        parts = ["install"]
        if self.owner:
            parts.append(f"-o {shlex.quote(self.owner)}")
        if self.group:
            parts.append(f"-g {shlex.quote(self.group)}")
        if self.mode:
            parts.append(f"-m {self.mode}")
        parts += [shlex.quote(self.src), shlex.quote(self.dest)]
        host.run_checked(" ".join(parts))

    def describe(self) -> str:
        return f"copy {self.src} to {self.dest}"


@dataclass
class SymlinkPresent(Resource):
    """``dest`` is a symbolic link pointing at ``src``."""

    src: str
    dest: str
    kind = "link"

    def check(self, host: HostConnector) -> bool:
        result = host.run(f"readlink {shlex.quote(self.dest)}")
        return result.success and result.stdout.strip() == self.src

    def apply(self, host: HostConnector) -> None:
        host.run_checked(f"ln -sfn {shlex.quote(self.src)} {shlex.quote(self.dest)}")

    def describe(self) -> str:
        return f"link {self.dest} -> {self.src}"


@dataclass
class PathAbsent(Resource):
    """Nothing exists at ``path``."""

    path: str
    kind = "absent"

    def check(self, host: HostConnector) -> bool:
        return not host.path_exists(self.path)

    def apply(self, host: HostConnector) -> None:
        host.run_checked(f"rm -rf {shlex.quote(self.path)}")

    def describe(self) -> str:
        return f"remove {self.path}"
