"""Rich Reporter Implementation."""

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from tsi_provision.model.result import Outcome, RunResult, TaskOutcome
from tsi_provision.playbook import Playbook
from tsi_provision.reporters.base import BaseReporter

OUTCOME_STYLE = {
    Outcome.UNCHANGED: ("green", "ok"),
    Outcome.CHANGED: ("yellow", "changed"),
    Outcome.FAILED: ("red", "failed"),
}


class RichReporter(BaseReporter):
    """Generates high-fidelity terminal output using Rich."""

    def report_progress(self, outcome: TaskOutcome) -> None:
        color, label = OUTCOME_STYLE[outcome.outcome]
        prefix = "HANDLER" if outcome.is_handler else "TASK"
        line = f"[{color}]{label:>8}[/] [dim]{prefix}[/] {escape(outcome.name)}"
        if outcome.detail:
            line += f" [dim]({escape(outcome.detail)})[/]"
        self.console.print(line)
        if outcome.error:
            self.console.print(f"         [red]{escape(str(outcome.error.cause))}[/]")

    def report_run(self, result: RunResult) -> int:
        self.console.print()

        table = Table(title=f"Run summary: {result.host}", show_lines=False)
        table.add_column("Step")
        table.add_column("Kind", style="dim")
        table.add_column("Outcome")
        for outcome in result.outcomes:
            color, label = OUTCOME_STYLE[outcome.outcome]
            table.add_row(
                escape(outcome.name),
                "handler" if outcome.is_handler else "task",
                f"[{color}]{label}[/]",
            )
        self.console.print(table)

        summary = (
            f"[green]{result.unchanged} ok[/], "
            f"[yellow]{result.changed} changed[/], "
            f"[red]{result.failures} failed[/]"
        )
        if result.dry_run:
            summary += " [dim](dry run, nothing was applied)[/]"

        if result.error:
            border, title = "red", "Run aborted"
            body = f"{summary}\n\n[bold red]{escape(str(result.error))}[/]"
        elif result.handler_failures:
            border, title = "yellow", "Handler failed, remaining handlers skipped"
            body = summary + "".join(f"\n[red]{escape(str(e))}[/]" for e in result.handler_failures)
        else:
            border, title = "green", "Converged"
            body = summary

        self.console.print(Panel(body, title=title, border_style=border))
        return result.exit_code

    def report_plan(self, playbook: Playbook) -> None:
        table = Table(title=playbook.name)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Task")
        table.add_column("Resource", style="cyan")
        table.add_column("Notifies", style="magenta")
        for i, action in enumerate(playbook.actions, start=1):
            table.add_row(str(i), action.name, action.resource.kind, ", ".join(action.notify))
        self.console.print(table)

        handlers = Table(title="Handlers")
        handlers.add_column("Handler")
        handlers.add_column("Resource", style="cyan")
        handlers.add_column("Notifies", style="magenta")
        for handler in playbook.handlers.values():
            handlers.add_row(handler.name, handler.resource.kind, ", ".join(handler.notify))
        self.console.print(handlers)
