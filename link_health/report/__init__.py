"""link_health.report: приёмники результатов обхода (консоль и JSON)."""

from __future__ import annotations

from typing import Protocol

import click

from link_health.crawler.models import LinkRecord
from link_health.report.json_report import render_json


class Reporter(Protocol):
    """Sink for per-link verdicts and advisory error messages."""

    def report(self, record: LinkRecord) -> None: ...

    def report_error(self, message: str) -> None: ...


def format_record(record: LinkRecord, color: bool = True) -> str:
    """``<url>\\thealthy`` or ``<url>\\tdown\\t<status>``; a missing status prints as 0."""
    if record.healthy:
        label = click.style("healthy", fg="green") if color else "healthy"
        return f"{record.url}\t{label}"
    status = str(record.status if record.status is not None else 0)
    label = click.style("down", fg="red") if color else "down"
    if color:
        status = click.style(status, bold=True)
    return f"{record.url}\t{label}\t{status}"


class ConsoleReporter:
    """Печатает записи в stdout, ошибки в stderr."""

    def __init__(self, color: bool = True) -> None:
        self.color = color

    def report(self, record: LinkRecord) -> None:
        click.echo(format_record(record, color=self.color))

    def report_error(self, message: str) -> None:
        prefix = click.style("Error:", fg="red") if self.color else "Error:"
        click.echo(f"{prefix} {message}", err=True)


__all__ = ["Reporter", "ConsoleReporter", "format_record", "render_json"]
