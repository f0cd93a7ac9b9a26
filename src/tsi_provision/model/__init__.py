"""Model package - Core data structures for tsi-provision."""

from tsi_provision.model.result import Outcome, RunResult, TaskOutcome
from tsi_provision.model.task import Action, Handler

__all__ = [
    "Action",
    "Handler",
    "Outcome",
    "RunResult",
    "TaskOutcome",
]
