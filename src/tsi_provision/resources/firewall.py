"""UFW firewall resources.

On a host where ufw is not installed yet (a dry run before the package
step) every firewall resource reads as unsatisfied.
"""

from dataclasses import dataclass

from tsi_provision.connector.base import HostConnector
from tsi_provision.resources.base import Resource


def _ufw_installed(host: HostConnector) -> bool:
    return host.run("command -v ufw").success


def _added_rules(host: HostConnector) -> list[str]:
    """Rules added with 'ufw ...', listed even while ufw is inactive."""
    result = host.run_checked("ufw show added")
    return [line.strip() for line in result.stdout.splitlines() if line.startswith("ufw ")]


@dataclass
class FirewallRuleAllowed(Resource):
    """Incoming traffic to ``port`` is allowed."""

    port: int
    proto: str | None = None
    kind = "ufw_rule"

    @property
    def target(self) -> str:
        return f"{self.port}/{self.proto}" if self.proto else str(self.port)

    def check(self, host: HostConnector) -> bool:
        if not _ufw_installed(host):
            return False
        return f"ufw allow {self.target}" in _added_rules(host)

    def apply(self, host: HostConnector) -> None:
        host.run_checked(f"ufw allow {self.target}")

    def describe(self) -> str:
        return f"allow port {self.target}"


@dataclass
class FirewallEnabled(Resource):
    """ufw is active and enabled at boot."""

    kind = "ufw_state"

    def check(self, host: HostConnector) -> bool:
        if not _ufw_installed(host):
            return False
        result = host.run_checked("ufw status")
        return "status: active" in result.stdout.lower()

    def apply(self, host: HostConnector) -> None:
        host.run_checked("ufw --force enable")

    def describe(self) -> str:
        return "enable ufw"
