"""Error taxonomy for a provisioning run.

CheckError and ApplyError are fatal: they stop the main sequence.
HandlerError is reported in the run result and ends the handler drain;
the main sequence has already completed by then.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tsi_provision.connector.base import CommandResult


class ProvisionError(Exception):
    """Base class for every error raised by tsi-provision."""


class CommandError(ProvisionError):
    """An external command exited non-zero."""

    def __init__(self, result: "CommandResult") -> None:
        self.result = result
        super().__init__(
            f"'{result.command}' exited with {result.exit_code}: {result.output or 'no output'}"
        )


class ActionError(ProvisionError):
    """A step failed. Carries the step name and the underlying cause."""

    phase = "apply"

    def __init__(self, name: str, cause: BaseException) -> None:
        self.name = name
        self.cause = cause
        super().__init__(f"{name}: {self.phase} failed: {cause}")


class CheckError(ActionError):
    """Current state of the host could not be determined."""

    phase = "check"


class ApplyError(ActionError):
    """Mutating the host towards the declared state failed."""

    phase = "apply"


class HandlerError(ActionError):
    """A notified handler failed during its check or apply."""

    def __init__(self, name: str, cause: BaseException, phase: str = "apply") -> None:
        self.phase = phase
        super().__init__(name, cause)


class UnknownHandlerError(ProvisionError, ValueError):
    """A step notifies a handler that is not registered."""

    def __init__(self, source: str, handler: str) -> None:
        self.source = source
        self.handler = handler
        super().__init__(f"'{source}' notifies unknown handler '{handler}'")
