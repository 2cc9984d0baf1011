import asyncio
import functools
import logging
import sys
from typing import Mapping

import click
from rich.console import Console
from rich.table import Table

from upsprobe.ups.models import Severity, TelemetryVariable

# stdout is reserved for the single result line
console = Console(stderr=True)

logger = logging.getLogger(__name__)


def handle_async_command(async_func):
    """Decorator to run an async probe step, reporting any failure as UNKNOWN."""
    @functools.wraps(async_func)
    def wrapper(*args, **kwargs):
        try:
            return asyncio.run(async_func(*args, **kwargs))
        except KeyboardInterrupt:
            click.echo(f"{Severity.UNKNOWN.name}: interrupted")
            sys.exit(int(Severity.UNKNOWN))
        except Exception as e:
            logger.debug("Unexpected error in %s", async_func.__name__, exc_info=True)
            click.echo(f"{Severity.UNKNOWN.name}: internal error: {e}")
            sys.exit(int(Severity.UNKNOWN))
    return wrapper


def print_variables(variables: Mapping[str, TelemetryVariable]) -> None:
    """Show the fetched telemetry on stderr."""
    table = Table(title="SNMP variables")
    table.add_column("Variable")
    table.add_column("OID")
    table.add_column("Raw value")
    for variable in variables.values():
        raw = "[dim]absent[/dim]" if variable.raw is None else repr(variable.raw)
        table.add_row(variable.name, variable.oid, raw)
    console.print(table)
