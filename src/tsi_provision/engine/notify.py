"""Notification queue: an insertion-ordered set of handler names."""

from collections.abc import Iterable, Iterator


class NotificationQueue:
    """Ordered, duplicate-suppressing queue of handler names.

    A name is accepted at most once for the lifetime of the queue, even
    after it has been drained, so a handler can never run twice in a run.
    Names appended while draining are picked up by the same drain.
    """

    def __init__(self) -> None:
        self._seen: set[str] = set()
        self._order: list[str] = []
        self._cursor = 0

    def notify(self, name: str) -> bool:
        """Queue a handler name. Returns False when it was already queued."""
        if name in self._seen:
            return False
        self._seen.add(name)
        self._order.append(name)
        return True

    def notify_all(self, names: Iterable[str]) -> list[str]:
        """Queue several names, returning the ones that were newly added."""
        return [name for name in names if self.notify(name)]

    def drain(self) -> Iterator[str]:
        """Yield pending names in first-notified order until none remain."""
        while self._cursor < len(self._order):
            name = self._order[self._cursor]
            self._cursor += 1
            yield name

    @property
    def pending(self) -> list[str]:
        return self._order[self._cursor:]

    def __contains__(self, name: object) -> bool:
        return name in self._seen

    def __len__(self) -> int:
        return len(self._order)
