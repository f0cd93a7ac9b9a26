"""APT package resources."""

import shlex
from dataclasses import dataclass, field

from tsi_provision.connector.base import HostConnector
from tsi_provision.resources.base import Resource

APT_ENV = "DEBIAN_FRONTEND=noninteractive"
APT_LISTS = "/var/lib/apt/lists"


@dataclass
class PackageCacheUpdated(Resource):
    """The apt package index is younger than ``valid_time`` seconds."""

    valid_time: int = 3600
    kind = "apt_cache"

    def check(self, host: HostConnector) -> bool:
        minutes = max(1, self.valid_time // 60)
        result = host.run(f"find {APT_LISTS} -maxdepth 0 -mmin -{minutes}")
        return result.success and bool(result.stdout.strip())

    def apply(self, host: HostConnector) -> None:
        host.run_checked(f"{APT_ENV} apt-get update -q")
        # apt-get does not always touch the directory itself
        host.run_checked(f"touch {APT_LISTS}")

    def describe(self) -> str:
        return "update apt package index"


@dataclass
class PackagePresent(Resource):
    """Every named package is installed."""

    names: list[str] = field(default_factory=list)
    kind = "apt"

    def __post_init__(self) -> None:
        if not self.names:
            raise ValueError("PackagePresent needs at least one package name")

    def missing(self, host: HostConnector) -> list[str]:
        """Packages not in 'install ok installed' state."""
        missing = []
        for name in self.names:
            result = host.run(f"dpkg-query -W -f='${{Status}}' {shlex.quote(name)}")
            if not (result.success and "install ok installed" in result.stdout):
                missing.append(name)
        return missing

    def check(self, host: HostConnector) -> bool:
        return not self.missing(host)

    def apply(self, host: HostConnector) -> None:
        packages = " ".join(shlex.quote(n) for n in self.missing(host) or self.names)
        host.run_checked(f"{APT_ENV} apt-get install -y -q {packages}")

    def describe(self) -> str:
        return f"install {', '.join(self.names)}"
