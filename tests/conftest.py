"""Pytest configuration and fixtures for tsi-provision tests."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))

from fakes import ScriptedHost  # noqa: E402

from tsi_provision.config import ProvisionSettings  # noqa: E402


@pytest.fixture
def host():
    """A scripted host where every command succeeds with no output."""
    return ScriptedHost()


@pytest.fixture
def settings():
    return ProvisionSettings()


@pytest.fixture
def sample_vars_file(tmp_path):
    path = tmp_path / "vars.yml"
    path.write_text(
        "server_name: metrics.internal\n"
        "prometheus_version: '2.45.0'\n"
        "prometheus_port: 9091\n"
    )
    return path
