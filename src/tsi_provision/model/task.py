"""Action and Handler - named steps binding a resource to notifications."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tsi_provision.resources.base import Resource


@dataclass
class Action:
    """A step of the main sequence.

    Attributes:
        name: Display name, unique within a run.
        resource: Declared state with its check/apply pair.
        notify: Handler names to queue when this step changes the host.
    """

    name: str
    resource: "Resource"
    notify: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Action must have a name")


@dataclass
class Handler(Action):
    """A step that only runs when notified, after the main sequence.

    Its own ``notify`` list chains further handlers, which are queued only
    when this handler changed the host.
    """
