"""Logging configuration for the CLI."""

import logging

from rich.console import Console
from rich.logging import RichHandler


class _NoiseFilter(logging.Filter):
    """Keep our own records, only warnings and up from third parties."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("tsi_provision"):
            return True
        return record.levelno >= logging.WARNING


def setup_logging(*, verbose: bool = False, console: Console | None = None) -> None:
    """Route log records to stderr through Rich.

    Quiet by default since reporters print the results; ``verbose``
    shows task outcomes and every command sent to the host.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    handler.addFilter(_NoiseFilter())
    root.addHandler(handler)

    logging.captureWarnings(True)
