"""Playbook variables for tsi-provision.

ProvisionSettings holds versions, paths, ports and the certificate
subject, optionally overridden from a YAML vars file.
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

DEFAULT_PROMETHEUS_CONFIG = """\
global:
  scrape_interval: 15s

scrape_configs:
  - job_name: 'prometheus'
    static_configs:
      - targets: ['localhost:9090']
"""


@dataclass
class ProvisionSettings:
    """Variables the provisioning run is rendered from."""

    prometheus_version: str = "2.26.0"
    prometheus_arch: str = "linux-amd64"
    prometheus_checksum: str | None = None
    prometheus_user: str = "prometheus"
    prometheus_group: str = "prometheus"
    prometheus_dir: str = "/etc/prometheus"
    prometheus_data_dir: str = "/var/lib/prometheus"
    prometheus_port: int = 9090
    prometheus_config: str = DEFAULT_PROMETHEUS_CONFIG
    ssh_port: int = 22
    server_name: str = "example.com"
    cert_days: int = 365
    cert_subject: str | None = None  # defaults to a CN of server_name
    cert_path: str = "/etc/ssl/certs/nginx-selfsigned.crt"
    key_path: str = "/etc/ssl/private/nginx-selfsigned.key"
    dhparam_path: str = "/etc/ssl/certs/dhparam.pem"
    dhparam_bits: int = 2048

    @property
    def certificate_subject(self) -> str:
        return self.cert_subject or f"/C=US/ST=State/L=City/O=Org/OU=Unit/CN={self.server_name}"

    @property
    def release_name(self) -> str:
        return f"prometheus-{self.prometheus_version}.{self.prometheus_arch}"

    @property
    def download_url(self) -> str:
        return (
            "https://github.com/prometheus/prometheus/releases/download/"
            f"v{self.prometheus_version}/{self.release_name}.tar.gz"
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProvisionSettings":
        """Build settings from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown setting(s): {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "ProvisionSettings":
        """Load settings from a YAML vars file, or defaults when None."""
        if path is None:
            return cls()
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a mapping of variables")
        # Ansible-style files keep the variables under 'vars'
        if set(data) == {"vars"}:
            data = data["vars"] or {}
        return cls.from_dict(data)
