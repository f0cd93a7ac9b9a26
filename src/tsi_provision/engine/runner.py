"""Task Runner - converges one host to an ordered list of declared states.

CONTRACT:
- Actions run strictly in order, one at a time.
- A step whose check passes is left alone (unchanged).
- The first check/apply failure in the main sequence stops the run; no
  handler runs and earlier changes stay in place.
- Notified handlers run after the main sequence, each at most once, in
  the order they were first notified.
- A failing handler is recorded and ends the drain: no later handler
  runs against a host whose configuration was just rejected.
"""

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence

from tsi_provision.connector.base import HostConnector
from tsi_provision.engine.errors import (
    ActionError,
    ApplyError,
    CheckError,
    HandlerError,
    ProvisionError,
    UnknownHandlerError,
)
from tsi_provision.engine.notify import NotificationQueue
from tsi_provision.model.result import Outcome, RunResult, TaskOutcome
from tsi_provision.model.task import Action, Handler

logger = logging.getLogger(__name__)

# Failures from the host side that become check/apply errors. Anything
# else is a bug and propagates untouched.
HOST_FAILURES = (ProvisionError, OSError)


class TaskRunner:
    """Execute actions against a host and drain the handlers they notify.

    Example:
        >>> runner = TaskRunner(host, handlers=[reload_nginx])
        >>> result = runner.execute([write_site, enable_site])
        >>> result.exit_code
        0
    """

    def __init__(
        self,
        host: HostConnector,
        handlers: Mapping[str, Handler] | Iterable[Handler] = (),
        *,
        dry_run: bool = False,
        on_outcome: Callable[[TaskOutcome], None] | None = None,
    ) -> None:
        self.host = host
        if isinstance(handlers, Mapping):
            self.handlers = dict(handlers)
        else:
            self.handlers = {h.name: h for h in handlers}
        self.dry_run = dry_run
        self.on_outcome = on_outcome

    def validate(self, actions: Sequence[Action]) -> None:
        """Reject duplicate action names and notifications that point at
        unregistered handlers."""
        seen: set[str] = set()
        for action in actions:
            if action.name in seen:
                raise ValueError(f"Duplicate action name '{action.name}'")
            seen.add(action.name)

        for step in [*actions, *self.handlers.values()]:
            for name in step.notify:
                if name not in self.handlers:
                    raise UnknownHandlerError(step.name, name)

    def execute(self, actions: Sequence[Action]) -> RunResult:
        """Run the main sequence, then every notified handler once."""
        self.validate(actions)
        result = RunResult(host=self.host.name, dry_run=self.dry_run)
        queue = NotificationQueue()

        for action in actions:
            try:
                outcome = self._converge(action, is_handler=False)
            except ActionError as e:
                logger.error("%s", e)
                self._record(result, TaskOutcome(action.name, Outcome.FAILED, error=e))
                result.error = e
                return result

            self._record(result, outcome)
            if outcome.changed:
                self._notify(queue, action)

        for name in queue.drain():
            handler = self.handlers[name]
            try:
                outcome = self._converge(handler, is_handler=True)
            except HandlerError as e:
                logger.error("%s", e)
                self._record(
                    result,
                    TaskOutcome(handler.name, Outcome.FAILED, is_handler=True, error=e),
                )
                break

            self._record(result, outcome)
            if outcome.changed:
                self._notify(queue, handler)

        return result

    def _converge(self, step: Action, *, is_handler: bool) -> TaskOutcome:
        resource = step.resource

        try:
            satisfied = resource.check(self.host)
        except HOST_FAILURES as e:
            if is_handler:
                raise HandlerError(step.name, e, phase="check") from e
            raise CheckError(step.name, e) from e

        if satisfied:
            return TaskOutcome(step.name, Outcome.UNCHANGED, is_handler=is_handler)

        if self.dry_run:
            return TaskOutcome(
                step.name,
                Outcome.CHANGED,
                is_handler=is_handler,
                detail=f"would {resource.describe()}",
            )

        try:
            resource.apply(self.host)
        except HOST_FAILURES as e:
            if is_handler:
                raise HandlerError(step.name, e) from e
            raise ApplyError(step.name, e) from e

        return TaskOutcome(
            step.name,
            Outcome.CHANGED,
            is_handler=is_handler,
            detail=resource.describe(),
        )

    def _notify(self, queue: NotificationQueue, step: Action) -> None:
        for name in queue.notify_all(step.notify):
            logger.debug("%s notified handler '%s'", step.name, name)

    def _record(self, result: RunResult, outcome: TaskOutcome) -> None:
        result.outcomes.append(outcome)
        kind = "handler" if outcome.is_handler else "task"
        logger.info("%s [%s] %s", kind, outcome.name, outcome.outcome.value)
        if self.on_outcome:
            self.on_outcome(outcome)
