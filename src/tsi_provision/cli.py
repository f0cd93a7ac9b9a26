"""
Click-based CLI for tsi-provision.

IMPORTANT: This module only ORCHESTRATES. It never decides host state.
- Loads settings and SSH credentials
- Builds the playbook and hands it to the runner
- Passes flags
- Formats output
"""

import sys

import click
import yaml
from rich.console import Console
from rich.prompt import Confirm, Prompt

from tsi_provision import __version__
from tsi_provision.config import ProvisionSettings
from tsi_provision.connector import HostConnector, LocalConnector, SSHConfig, SSHConnector
from tsi_provision.credentials import forget_password, lookup_password, store_password
from tsi_provision.logging_setup import setup_logging
from tsi_provision.playbook import build_playbook
from tsi_provision.reporters import get_reporter
from tsi_provision.templates import RENDERERS, render

console = Console()

LOCAL_TARGETS = ("local", "localhost")
FORMATS = ["rich", "plain", "json"]


@click.group()
@click.version_option(version=__version__, prog_name="tsi-provision")
@click.option("--verbose", "-v", is_flag=True, help="Log every task and host command")
def main(verbose: bool) -> None:
    """tsi-provision: Prometheus behind Nginx with TLS and UFW, on one host.

    Every step is idempotent: re-running converges the host and changes
    nothing that already matches.
    """
    setup_logging(verbose=verbose)


def _resolve_connector(
    server: str,
    user: str = "root",
    port: int = 22,
    key: str | None = None,
    password: str | None = None,
    use_sudo: bool = True,
) -> HostConnector:
    """Resolve server string to a connector ('local' or an SSH host)."""
    if server in LOCAL_TARGETS:
        return LocalConnector(server)
    cfg = SSHConfig(host=server, user=user, port=port, key_path=key, password=password, use_sudo=use_sudo)
    return SSHConnector(cfg)


def _resolve_password(server: str, user: str, key: str | None, ask_pass: bool, remember: bool) -> str | None:
    if server in LOCAL_TARGETS:
        return None
    if ask_pass:
        password = Prompt.ask(f"SSH password for {user}@{server}", password=True, console=console)
        if remember and store_password(user, server, password):
            console.print(f"[dim]Password for {user}@{server} saved to the keyring.[/]")
        return password
    if key:
        return None
    return lookup_password(user, server)


def _load_settings(vars_file: str | None) -> ProvisionSettings:
    try:
        return ProvisionSettings.load(vars_file)
    except (ValueError, TypeError, yaml.YAMLError) as e:
        console.print(f"[bold red]Invalid vars file:[/] {e}")
        sys.exit(1)


def _default_format(fmt: str | None) -> str:
    if fmt is None:
        return "rich" if sys.stdout.isatty() else "plain"
    return fmt


@main.command()
@click.argument("server")
@click.option("--user", "-u", default="root", help="SSH username")
@click.option("--port", "-p", default=22, help="SSH port")
@click.option("--key", "-k", type=click.Path(), help="Path to SSH private key")
@click.option("--ask-pass", is_flag=True, help="Prompt for the SSH password")
@click.option("--remember-password", is_flag=True, help="Save the prompted password in the OS keyring")
@click.option("--sudo/--no-sudo", default=True, help="Use sudo for commands")
@click.option("--vars", "vars_file", type=click.Path(exists=True, dir_okay=False), help="YAML file overriding playbook variables")
@click.option("--dry-run", is_flag=True, help="Check every step and report what would change")
@click.option("--format", "fmt", type=click.Choice(FORMATS), default=None, help="Output format")
@click.option("--yes", is_flag=True, help="Skip confirmation prompt")
def apply(
    server: str,
    user: str,
    port: int,
    key: str | None,
    ask_pass: bool,
    remember_password: bool,
    sudo: bool,
    vars_file: str | None,
    dry_run: bool,
    fmt: str | None,
    yes: bool,
) -> None:
    """Converge SERVER to the declared state.

    SERVER is a hostname/IP reached over SSH, or 'local'. Without --key
    or --ask-pass a password saved with --remember-password is used.

    ⚠️  WARNING: Without --dry-run this modifies the server!
    """
    fmt = _default_format(fmt)
    settings = _load_settings(vars_file)
    playbook = build_playbook(settings)
    password = _resolve_password(server, user, key, ask_pass, remember_password)

    is_dry_run = dry_run
    if not dry_run and not yes:
        console.print(f"\n[bold yellow]⚠️  About to provision {server}.[/]")
        if not Confirm.ask("Do you want to proceed with applying changes?", console=console):
            console.print("[dim]Switching to dry-run mode...[/]")
            is_dry_run = True

    reporter = get_reporter(fmt, console)
    try:
        with _resolve_connector(server, user, port, key, password, sudo) as host:
            result = playbook.run(host, dry_run=is_dry_run, on_outcome=reporter.report_progress)
    except ValueError as e:
        # unknown handler names and duplicate action names
        console.print(f"[bold red]Playbook error:[/] {e}")
        sys.exit(1)
    except OSError as e:
        # ConnectionError and local spawn failures
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)

    sys.exit(reporter.report_run(result))


@main.command("list-tasks")
@click.option("--vars", "vars_file", type=click.Path(exists=True, dir_okay=False), help="YAML file overriding playbook variables")
@click.option("--format", "fmt", type=click.Choice(FORMATS), default=None, help="Output format")
def list_tasks(vars_file: str | None, fmt: str | None) -> None:
    """List tasks and handlers in run order. Touches no host."""
    playbook = build_playbook(_load_settings(vars_file))
    get_reporter(_default_format(fmt), console).report_plan(playbook)


@main.command("render")
@click.argument("name", type=click.Choice(list(RENDERERS)))
@click.option("--vars", "vars_file", type=click.Path(exists=True, dir_okay=False), help="YAML file overriding playbook variables")
def render_cmd(name: str, vars_file: str | None) -> None:
    """Print one rendered file exactly as it would be written."""
    click.echo(render(name, _load_settings(vars_file)), nl=False)


@main.command("forget-password")
@click.argument("server")
@click.option("--user", "-u", default="root", help="SSH username")
def forget_password_cmd(server: str, user: str) -> None:
    """Remove the saved SSH password for USER@SERVER."""
    if forget_password(user, server):
        console.print(f"[bold green]✓ Forgot password for:[/] {user}@{server}")
    else:
        console.print(f"[bold red]Error:[/] No saved password for {user}@{server}.")
        sys.exit(1)


if __name__ == "__main__":
    main()
