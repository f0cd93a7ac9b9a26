"""Download and archive extraction resources."""

import shlex
from dataclasses import dataclass

from tsi_provision.connector.base import HostConnector
from tsi_provision.engine.errors import ProvisionError
from tsi_provision.resources.base import Resource, sha256_of


@dataclass
class UrlDownloaded(Resource):
    """``url`` has been fetched to ``dest``.

    An existing ``dest`` is trusted unless a sha256 ``checksum`` is
    declared, in which case it must match.
    """

    url: str
    dest: str
    checksum: str | None = None
    kind = "get_url"

    def check(self, host: HostConnector) -> bool:
        if not host.file_exists(self.dest):
            return False
        if self.checksum is None:
            return True
        return sha256_of(host, self.dest) == self.checksum.lower()

    def apply(self, host: HostConnector) -> None:
        partial = f"{self.dest}.part"
        host.run_checked(
            f"wget -q -O {shlex.quote(partial)} {shlex.quote(self.url)}"
        )
        if self.checksum is not None:
            digest = sha256_of(host, partial)
            if digest != self.checksum.lower():
                host.run(f"rm -f {shlex.quote(partial)}")
                raise ProvisionError(
                    f"checksum mismatch for {self.url}: expected {self.checksum}, got {digest}"
                )
        host.run_checked(f"mv -f {shlex.quote(partial)} {shlex.quote(self.dest)}")

    def describe(self) -> str:
        return f"download {self.url}"


@dataclass
class ArchiveExtracted(Resource):
    """An archive already on the host has been unpacked into ``dest``.

    ``creates`` names a path the extraction produces; while it exists
    the archive is not unpacked again.
    """

    src: str
    dest: str
    creates: str | None = None
    kind = "unarchive"

    def check(self, host: HostConnector) -> bool:
        if self.creates is None:
            return False
        return host.path_exists(self.creates)

    def apply(self, host: HostConnector) -> None:
        host.run_checked(f"tar -xf {shlex.quote(self.src)} -C {shlex.quote(self.dest)}")

    def describe(self) -> str:
        return f"extract {self.src} into {self.dest}"
