"""Run results - per-step outcomes reported back to the user."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tsi_provision.engine.errors import ActionError, HandlerError


class Outcome(str, Enum):
    """What a step did to the host."""

    UNCHANGED = "unchanged"
    CHANGED = "changed"
    FAILED = "failed"


@dataclass
class TaskOutcome:
    """Outcome of a single action or handler."""

    name: str
    outcome: Outcome
    is_handler: bool = False
    detail: str = ""
    error: "ActionError | None" = None

    @property
    def changed(self) -> bool:
        return self.outcome == Outcome.CHANGED

    @property
    def failed(self) -> bool:
        return self.outcome == Outcome.FAILED

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "kind": "handler" if self.is_handler else "action",
            "outcome": self.outcome.value,
            "detail": self.detail,
            "error": str(self.error) if self.error else None,
        }


@dataclass
class RunResult:
    """Summary of a whole run.

    ``error`` holds the fatal error that stopped the main sequence, if any.
    Handler failures live in the outcomes only.
    """

    host: str = ""
    outcomes: list[TaskOutcome] = field(default_factory=list)
    error: "ActionError | None" = None
    dry_run: bool = False

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def handler_failures(self) -> list["HandlerError"]:
        return [
            o.error
            for o in self.outcomes
            if o.is_handler and o.failed and o.error is not None
        ]

    @property
    def changed(self) -> int:
        return sum(1 for o in self.outcomes if o.outcome == Outcome.CHANGED)

    @property
    def unchanged(self) -> int:
        return sum(1 for o in self.outcomes if o.outcome == Outcome.UNCHANGED)

    @property
    def failures(self) -> int:
        return sum(1 for o in self.outcomes if o.outcome == Outcome.FAILED)

    @property
    def exit_code(self) -> int:
        """0 converged, 1 fatal error, 2 only handler failures."""
        if self.failed:
            return 1
        if self.handler_failures:
            return 2
        return 0

    def outcome_of(self, name: str) -> TaskOutcome | None:
        return next((o for o in self.outcomes if o.name == name), None)

    def to_dict(self) -> dict:
        return {
            "host": self.host,
            "dry_run": self.dry_run,
            "summary": {
                "changed": self.changed,
                "unchanged": self.unchanged,
                "failed": self.failures,
            },
            "error": str(self.error) if self.error else None,
            "outcomes": [o.to_dict() for o in self.outcomes],
            "exit_code": self.exit_code,
        }
