"""Plain Text Reporter Implementation."""

from tsi_provision.model.result import RunResult, TaskOutcome
from tsi_provision.playbook import Playbook
from tsi_provision.reporters.base import BaseReporter


class PlainReporter(BaseReporter):
    """Generates clean, text-only output."""

    def report_progress(self, outcome: TaskOutcome) -> None:
        prefix = "HANDLER" if outcome.is_handler else "TASK"
        line = f"{outcome.outcome.value.upper()}: {prefix} {outcome.name}"
        if outcome.detail:
            line += f" ({outcome.detail})"
        self.console.print(line, markup=False, highlight=False, soft_wrap=True)
        if outcome.error:
            self.console.print(f"   Cause: {outcome.error.cause}", markup=False, highlight=False, soft_wrap=True)

    def report_run(self, result: RunResult) -> int:
        self.console.print()
        self.console.print(
            f"RUN SUMMARY host={result.host} ok={result.unchanged} "
            f"changed={result.changed} failed={result.failures}"
            + (" dry_run=true" if result.dry_run else ""),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
        if result.error:
            self.console.print(f"ABORTED: {result.error}", markup=False, highlight=False, soft_wrap=True)
        for error in result.handler_failures:
            self.console.print(f"HANDLER FAILED: {error}", markup=False, highlight=False, soft_wrap=True)
        return result.exit_code

    def report_plan(self, playbook: Playbook) -> None:
        self.console.print(f"PLAYBOOK: {playbook.name}", markup=False)
        for i, action in enumerate(playbook.actions, start=1):
            line = f"{i:>3}. {action.name} [{action.resource.kind}]"
            if action.notify:
                line += f" notify: {', '.join(action.notify)}"
            self.console.print(line, markup=False, highlight=False, soft_wrap=True)
        self.console.print("HANDLERS:", markup=False)
        for handler in playbook.handlers.values():
            line = f"  - {handler.name} [{handler.resource.kind}]"
            if handler.notify:
                line += f" notify: {', '.join(handler.notify)}"
            self.console.print(line, markup=False, highlight=False, soft_wrap=True)
