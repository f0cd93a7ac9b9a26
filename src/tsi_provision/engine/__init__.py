"""Engine package - ordered execution with deferred handlers."""

from tsi_provision.engine.errors import (
    ActionError,
    ApplyError,
    CheckError,
    CommandError,
    HandlerError,
    ProvisionError,
    UnknownHandlerError,
)
from tsi_provision.engine.notify import NotificationQueue
from tsi_provision.engine.runner import TaskRunner

__all__ = [
    "ActionError",
    "ApplyError",
    "CheckError",
    "CommandError",
    "HandlerError",
    "NotificationQueue",
    "ProvisionError",
    "TaskRunner",
    "UnknownHandlerError",
]
