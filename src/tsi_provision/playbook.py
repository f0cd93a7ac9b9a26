"""The Prometheus + Nginx provisioning run.

Builds the ordered main sequence and the handler registry from
ProvisionSettings. Nothing here talks to a host; TaskRunner does.
"""

import shlex
from collections.abc import Callable
from dataclasses import dataclass, field

from tsi_provision import templates
from tsi_provision.config import ProvisionSettings
from tsi_provision.connector.base import HostConnector
from tsi_provision.engine.runner import TaskRunner
from tsi_provision.model.result import RunResult, TaskOutcome
from tsi_provision.model.task import Action, Handler
from tsi_provision.resources import (
    ArchiveExtracted,
    CommandRun,
    DirectoryPresent,
    FileContent,
    FileCopied,
    FirewallEnabled,
    FirewallRuleAllowed,
    GroupPresent,
    PackageCacheUpdated,
    PackagePresent,
    PathAbsent,
    ServiceState,
    SymlinkPresent,
    SystemdDaemonReloaded,
    UrlDownloaded,
    UserPresent,
)

VALIDATE_NGINX = "Validate Nginx Config"
RELOAD_NGINX = "Reload Nginx"
RESTART_NGINX = "Restart Nginx"

NGINX_ROOT = "/etc/nginx"
PROMETHEUS_ARCHIVE = "/tmp/prometheus.tar.gz"
PROMETHEUS_BINARIES = ("prometheus", "promtool")


@dataclass
class Playbook:
    """Ordered actions plus the handlers they may notify."""

    name: str
    actions: list[Action] = field(default_factory=list)
    handlers: dict[str, Handler] = field(default_factory=dict)

    def run(
        self,
        host: HostConnector,
        *,
        dry_run: bool = False,
        on_outcome: Callable[[TaskOutcome], None] | None = None,
    ) -> RunResult:
        runner = TaskRunner(host, self.handlers, dry_run=dry_run, on_outcome=on_outcome)
        return runner.execute(self.actions)


def build_handlers() -> dict[str, Handler]:
    handlers = [
        Handler(VALIDATE_NGINX, CommandRun("nginx -t"), notify=[RESTART_NGINX]),
        Handler(RELOAD_NGINX, ServiceState("nginx", state="reloaded")),
        Handler(RESTART_NGINX, ServiceState("nginx", state="restarted")),
    ]
    return {h.name: h for h in handlers}


def build_actions(settings: ProvisionSettings) -> list[Action]:
    s = settings
    release_dir = f"/tmp/{s.release_name}"
    nginx_changed = [VALIDATE_NGINX, RELOAD_NGINX]

    actions = [
        Action("Update apt package index", PackageCacheUpdated()),
        Action("Ensure Nginx is installed", PackagePresent(["nginx"])),
        Action(
            "Install other required packages",
            PackagePresent(["wget", "tar", "ufw", "openssl"]),
        ),
        Action("Create Prometheus group", GroupPresent(s.prometheus_group, system=True)),
        Action(
            "Create Prometheus user",
            UserPresent(
                s.prometheus_user,
                group=s.prometheus_group,
                system=True,
                shell="/sbin/nologin",
            ),
        ),
    ]

    for path in (s.prometheus_dir, s.prometheus_data_dir):
        actions.append(
            Action(
                f"Create Prometheus directories ({path})",
                DirectoryPresent(path, s.prometheus_user, s.prometheus_group, "0755"),
            )
        )

    actions += [
        Action(
            "Download Prometheus",
            UrlDownloaded(s.download_url, PROMETHEUS_ARCHIVE, checksum=s.prometheus_checksum),
        ),
        Action(
            "Extract Prometheus",
            ArchiveExtracted(PROMETHEUS_ARCHIVE, "/tmp/", creates=release_dir),
        ),
    ]

    for binary in PROMETHEUS_BINARIES:
        actions.append(
            Action(
                f"Move Prometheus binaries ({binary})",
                FileCopied(f"{release_dir}/{binary}", f"/usr/local/bin/{binary}", "root", "root", "0755"),
            )
        )

    actions += [
        Action(
            "Move Prometheus configuration",
            FileContent(
                f"{s.prometheus_dir}/prometheus.yml",
                templates.render_prometheus_config(s),
                s.prometheus_user,
                s.prometheus_group,
                "0644",
            ),
        ),
        Action(
            "Create Prometheus systemd service",
            FileContent("/etc/systemd/system/prometheus.service", templates.render_prometheus_unit(s)),
        ),
        Action("Reload systemd to register Prometheus service", SystemdDaemonReloaded()),
        Action(
            "Enable and start Prometheus service",
            ServiceState("prometheus", enabled=True, state="started"),
        ),
        Action("Configure UFW - Allow SSH", FirewallRuleAllowed(s.ssh_port)),
        Action("Configure UFW - Allow Prometheus", FirewallRuleAllowed(s.prometheus_port)),
        Action(
            "Generate OpenSSL certificate (non-interactive)",
            CommandRun(
                f"openssl req -x509 -nodes -days {s.cert_days} -newkey rsa:2048"
                f" -keyout {shlex.quote(s.key_path)} -out {shlex.quote(s.cert_path)}"
                f" -subj {shlex.quote(s.certificate_subject)}",
                creates=s.key_path,
            ),
        ),
        Action(
            "Create Diffie-Hellman group",
            CommandRun(
                f"openssl dhparam -out {shlex.quote(s.dhparam_path)} {s.dhparam_bits}",
                creates=s.dhparam_path,
            ),
        ),
        Action(
            "Configure Nginx for SSL",
            FileContent(f"{NGINX_ROOT}/snippets/self-signed.conf", templates.render_self_signed_snippet(s)),
        ),
        Action(
            "Configure Nginx SSL parameters",
            FileContent(f"{NGINX_ROOT}/snippets/ssl-params.conf", templates.render_ssl_params_snippet(s)),
        ),
        Action(
            "Configure Nginx server block for Prometheus",
            FileContent(f"{NGINX_ROOT}/sites-available/prometheus", templates.render_nginx_site(s)),
            notify=list(nginx_changed),
        ),
        Action(
            "Enable Nginx site for Prometheus",
            SymlinkPresent(
                f"{NGINX_ROOT}/sites-available/prometheus",
                f"{NGINX_ROOT}/sites-enabled/prometheus",
            ),
        ),
        Action(
            "Remove default Nginx configuration",
            PathAbsent(f"{NGINX_ROOT}/sites-enabled/default"),
            notify=list(nginx_changed),
        ),
        Action("Enable and start Nginx", ServiceState("nginx", enabled=True, state="started")),
        Action("Enable UFW (after all allow rules)", FirewallEnabled()),
    ]
    return actions


def build_playbook(settings: ProvisionSettings | None = None) -> Playbook:
    """Assemble the full run for the given settings (defaults when None)."""
    settings = settings or ProvisionSettings()
    return Playbook(
        name="Setup Security and Monitoring",
        actions=build_actions(settings),
        handlers=build_handlers(),
    )
