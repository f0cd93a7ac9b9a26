"""Base Reporter Interface."""

from abc import ABC, abstractmethod

from rich.console import Console

from tsi_provision.model.result import RunResult, TaskOutcome
from tsi_provision.playbook import Playbook


class BaseReporter(ABC):
    """Abstract base class for all run reporters."""

    def __init__(self, console: Console) -> None:
        self.console = console

    def report_progress(self, outcome: TaskOutcome) -> None:
        """Called as each step finishes. Streaming is optional."""
        return None

    @abstractmethod
    def report_run(self, result: RunResult) -> int:
        """Report a finished run and return the process exit code."""
        pass

    @abstractmethod
    def report_plan(self, playbook: Playbook) -> None:
        """List the main sequence and handlers without running anything."""
        pass
