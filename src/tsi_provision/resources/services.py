"""Systemd resources - unit state and daemon reloads."""

import shlex
from dataclasses import dataclass

from tsi_provision.connector.base import HostConnector
from tsi_provision.resources.base import Resource

STATE_VERBS = {
    "started": "start",
    "stopped": "stop",
    "restarted": "restart",
    "reloaded": "reload",
}


@dataclass
class SystemdDaemonReloaded(Resource):
    """systemd has re-read its unit files. Always runs."""

    kind = "daemon_reload"

    def check(self, host: HostConnector) -> bool:
        return False

    def apply(self, host: HostConnector) -> None:
        host.run_checked("systemctl daemon-reload")

    def describe(self) -> str:
        return "reload systemd units"


@dataclass
class ServiceState(Resource):
    """A unit is enabled/disabled and started/stopped.

    ``restarted`` and ``reloaded`` are transitions rather than states, so
    they are never satisfied and act every time they are evaluated.
    """

    name: str
    enabled: bool | None = None
    state: str | None = None
    kind = "systemd"

    def __post_init__(self) -> None:
        if self.state is not None and self.state not in STATE_VERBS:
            raise ValueError(f"Unknown service state '{self.state}', expected one of {list(STATE_VERBS)}")
        if self.enabled is None and self.state is None:
            raise ValueError(f"ServiceState for {self.name} declares nothing")

    def _is_enabled(self, host: HostConnector) -> bool:
        result = host.run(f"systemctl is-enabled {shlex.quote(self.name)}")
        return result.stdout.strip() == "enabled"

    def _is_active(self, host: HostConnector) -> bool:
        result = host.run(f"systemctl is-active {shlex.quote(self.name)}")
        return result.stdout.strip() == "active"

    def _state_ok(self, host: HostConnector) -> bool:
        if self.state is None:
            return True
        if self.state == "started":
            return self._is_active(host)
        if self.state == "stopped":
            return not self._is_active(host)
        return False

    def _enabled_ok(self, host: HostConnector) -> bool:
        return self.enabled is None or self._is_enabled(host) == self.enabled

    def check(self, host: HostConnector) -> bool:
        return self._enabled_ok(host) and self._state_ok(host)

    def apply(self, host: HostConnector) -> None:
        unit = shlex.quote(self.name)
        if not self._enabled_ok(host):
            verb = "enable" if self.enabled else "disable"
            host.run_checked(f"systemctl {verb} {unit}")
        if not self._state_ok(host):
            verb = STATE_VERBS[self.state]
            host.run_checked(f"systemctl {verb} {unit}")

    def describe(self) -> str:
        wanted = []
        if self.enabled is not None:
            wanted.append("enable" if self.enabled else "disable")
        if self.state is not None:
            wanted.append(STATE_VERBS[self.state])
        return f"{' and '.join(wanted)} {self.name}"
