"""Tests for CLI commands.

Verifies:
1. list-tasks and render never touch a host.
2. apply reports through the chosen format and exits 0/1/2.
3. Declining the confirmation falls back to a dry run.
4. Server strings resolve to local or SSH connectors; passwords come
   from a prompt or the keyring.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner
from fakes import ScriptedHost
from rich.console import Console

from tsi_provision.cli import _resolve_connector, main
from tsi_provision.connector import LocalConnector, SSHConnector


@pytest.fixture(autouse=True)
def quiet_cli():
    """Colourless wide console, no global logging changes, no real keyring."""
    with patch("tsi_provision.cli.console", Console(color_system=None, width=200)), \
         patch("tsi_provision.cli.setup_logging"), \
         patch("tsi_provision.cli.lookup_password", return_value=None):
        yield


@pytest.fixture
def invoke():
    runner = CliRunner()

    def _invoke(args, **kwargs):
        return runner.invoke(main, args, **kwargs)

    return _invoke


def _with_host(host):
    return patch("tsi_provision.cli._resolve_connector", return_value=host)


def test_list_tasks_plain(invoke):
    result = invoke(["list-tasks", "--format", "plain"])

    assert result.exit_code == 0
    assert "PLAYBOOK: Setup Security and Monitoring" in result.output
    assert "  1. Update apt package index [apt_cache]" in result.output
    assert (
        "22. Configure Nginx server block for Prometheus [file] "
        "notify: Validate Nginx Config, Reload Nginx"
    ) in result.output
    assert "  - Validate Nginx Config [command] notify: Restart Nginx" in result.output


def test_list_tasks_json(invoke):
    result = invoke(["list-tasks", "--format", "json"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert len(data["actions"]) == 26
    assert [h["name"] for h in data["handlers"]] == ["Validate Nginx Config", "Reload Nginx", "Restart Nginx"]


def test_render_uses_vars_file(invoke, sample_vars_file):
    result = invoke(["render", "nginx-site", "--vars", str(sample_vars_file)])

    assert result.exit_code == 0
    assert "server_name metrics.internal;" in result.output
    assert "proxy_pass http://localhost:9091;" in result.output


def test_invalid_vars_file_exits_1(invoke, tmp_path):
    bad = tmp_path / "bad.yml"
    bad.write_text("nope: 1\n")

    result = invoke(["render", "nginx-site", "--vars", str(bad)])

    assert result.exit_code == 1
    assert "Invalid vars file" in result.output


def test_apply_dry_run_json(invoke):
    host = ScriptedHost()
    with _with_host(host):
        result = invoke(["apply", "local", "--dry-run", "--format", "json"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["host"] == "test-host"
    assert data["dry_run"] is True
    assert data["exit_code"] == 0
    assert data["outcomes"][0]["name"] == "Update apt package index"
    assert not host.ran("apt-get install")


def test_apply_fatal_failure_exits_1(invoke):
    host = ScriptedHost().on("apt-get install", exit_code=100, stderr="E: Unable to locate package nginx")
    with _with_host(host):
        result = invoke(["apply", "web", "--yes", "--format", "plain"])

    assert result.exit_code == 1
    assert "FAILED: TASK Ensure Nginx is installed" in result.output
    assert "ABORTED: Ensure Nginx is installed: apply failed" in result.output


def test_apply_handler_failure_exits_2(invoke):
    host = ScriptedHost().on("nginx -t", exit_code=1, stderr="nginx: [emerg] bad directive")
    with _with_host(host):
        result = invoke(["apply", "web", "--yes", "--format", "plain"])

    assert result.exit_code == 2
    assert "HANDLER FAILED: Validate Nginx Config" in result.output


def test_declined_confirmation_switches_to_dry_run(invoke):
    host = ScriptedHost()
    with _with_host(host):
        result = invoke(["apply", "web", "--format", "plain"], input="n\n")

    assert result.exit_code == 0
    assert "Switching to dry-run mode" in result.output
    assert "dry_run=true" in result.output
    assert not host.ran("apt-get install")


def test_connection_failure_exits_1(invoke):
    connector = MagicMock()
    connector.__enter__.side_effect = ConnectionError("Authentication failed: bad key")
    with _with_host(connector):
        result = invoke(["apply", "web", "--yes", "--format", "plain"])

    assert result.exit_code == 1
    assert "Authentication failed" in result.output


def test_ssh_options_reach_the_connector(invoke):
    with _with_host(ScriptedHost()) as resolve, \
         patch("tsi_provision.cli.lookup_password", return_value="saved") as lookup:
        result = invoke(["apply", "web", "-u", "deploy", "-p", "2222", "--no-sudo", "--dry-run", "--format", "plain"])

    assert result.exit_code == 0
    lookup.assert_called_once_with("deploy", "web")
    resolve.assert_called_once_with("web", "deploy", 2222, None, "saved", False)


def test_key_login_skips_keyring(invoke, tmp_path):
    key = tmp_path / "id_ed25519"
    with _with_host(ScriptedHost()) as resolve, \
         patch("tsi_provision.cli.lookup_password") as lookup:
        result = invoke(["apply", "web", "--key", str(key), "--dry-run", "--format", "plain"])

    assert result.exit_code == 0
    lookup.assert_not_called()
    assert resolve.call_args.args[3] == str(key)
    assert resolve.call_args.args[4] is None


def test_prompted_password_is_remembered(invoke):
    with _with_host(ScriptedHost()) as resolve, \
         patch("tsi_provision.cli.Prompt.ask", return_value="s3cret"), \
         patch("tsi_provision.cli.store_password", return_value=True) as store:
        result = invoke(["apply", "web", "--ask-pass", "--remember-password", "--dry-run", "--format", "plain"])

    assert result.exit_code == 0
    store.assert_called_once_with("root", "web", "s3cret")
    assert resolve.call_args.args[4] == "s3cret"
    assert "saved to the keyring" in result.output


def test_forget_password(invoke):
    with patch("tsi_provision.cli.forget_password", side_effect=[True, False]) as forget:
        assert invoke(["forget-password", "web", "-u", "deploy"]).exit_code == 0
        result = invoke(["forget-password", "web", "-u", "deploy"])

    assert result.exit_code == 1
    assert "No saved password for deploy@web" in result.output
    forget.assert_called_with("deploy", "web")


class TestResolveConnector:
    def test_local_targets(self):
        connector = _resolve_connector("local")
        assert isinstance(connector, LocalConnector)
        assert connector.name == "local"

    def test_ssh_options(self):
        connector = _resolve_connector("10.0.0.5", "deploy", 2222, "~/.ssh/id_ed25519", None, False)

        assert isinstance(connector, SSHConnector)
        assert connector.config.host == "10.0.0.5"
        assert connector.config.user == "deploy"
        assert connector.config.port == 2222
        assert connector.config.key_path == "~/.ssh/id_ed25519"
        assert connector.config.use_sudo is False

    def test_plain_hostname_uses_root(self):
        connector = _resolve_connector("203.0.113.7")
        assert connector.config.host == "203.0.113.7"
        assert connector.config.user == "root"
        assert connector.config.password is None
