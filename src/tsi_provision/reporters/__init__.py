"""Reporters - render run results for humans and machines."""

from rich.console import Console

from tsi_provision.reporters.base import BaseReporter
from tsi_provision.reporters.json_reporter import JsonReporter
from tsi_provision.reporters.plain_reporter import PlainReporter
from tsi_provision.reporters.rich_reporter import RichReporter

REPORTERS: dict[str, type[BaseReporter]] = {
    "rich": RichReporter,
    "plain": PlainReporter,
    "json": JsonReporter,
}


def get_reporter(format_mode: str, console: Console) -> BaseReporter:
    """Pick the reporter for an output format."""
    try:
        return REPORTERS[format_mode](console)
    except KeyError:
        raise ValueError(f"Unknown output format '{format_mode}'") from None


__all__ = ["BaseReporter", "JsonReporter", "PlainReporter", "RichReporter", "get_reporter"]
