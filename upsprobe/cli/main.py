import logging
from typing import Dict, Optional

import click

from upsprobe.config import get_settings
from upsprobe.ups.errors import ConfigurationError, TransportError
from upsprobe.ups.evaluator import evaluate, transport_failure
from upsprobe.ups.fetcher import TelemetryFetcher
from upsprobe.ups.models import CheckCategory, EvaluationResult, Severity, ThresholdSet
from upsprobe.utils.logging import setup_logging

from .utils import handle_async_command, print_variables

logger = logging.getLogger(__name__)

CHECKS = [category.value for category in CheckCategory]


class ProbeCommand(click.Command):
    """
    Click command that reports usage errors the Nagios way: one UNKNOWN
    line on stdout, usage on stderr, exit code 3.
    """

    def _unknown(self, error: click.UsageError) -> click.UsageError:
        click.echo(f"{Severity.UNKNOWN.name}: {error.format_message()}")
        error.exit_code = int(Severity.UNKNOWN)
        return error

    def parse_args(self, ctx, args):
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            raise self._unknown(e)

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            raise self._unknown(e)


def _show_usage(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    click.echo(ctx.get_help())
    ctx.exit(int(Severity.UNKNOWN))


@handle_async_command
async def _probe(fetcher: TelemetryFetcher, category: CheckCategory,
                 thresholds: ThresholdSet, show_variables: bool) -> EvaluationResult:
    try:
        variables = await fetcher.fetch(category)
    except TransportError as e:
        return transport_failure(e)
    if show_variables:
        print_variables(variables)
    return evaluate(category, variables, thresholds)


@click.command(cls=ProbeCommand, context_settings={"help_option_names": []})
@click.option('--help', is_flag=True, is_eager=True, expose_value=False, callback=_show_usage,
              help='Show this message and exit with UNKNOWN.')
@click.option('-h', '--host', required=True, help='UPS hostname or IP address.')
@click.option('-c', '--community', default=None, help='SNMP community (default: public).')
@click.option('-p', '--port', type=click.IntRange(1, 65535), default=None, help='SNMP port (default: 161).')
@click.option('-t', '--timeout', type=click.FloatRange(min=0, min_open=True), default=None,
              help='Seconds to wait for the SNMP response (default: 15).')
@click.option('-s', '--check', 'check', type=click.Choice(CHECKS, case_sensitive=False), required=True,
              help='Check to run.')
@click.option('-A', 'charge_warning', type=float, help='Battery charge warning level in % (default: 70).')
@click.option('-B', 'charge_critical', type=float, help='Battery charge critical level in % (default: 40).')
@click.option('-C', 'temperature_warning', type=float, help='Temperature warning level in C (default: 50).')
@click.option('-D', 'temperature_critical', type=float, help='Temperature critical level in C (default: 60).')
@click.option('-E', 'load_warning', type=float, help='Load warning level in % (default: 75).')
@click.option('-F', 'load_critical', type=float, help='Load critical level in % (default: 85).')
@click.option('-G', 'voltage_low_warning', type=float, help='Low voltage warning level in V (default: 115).')
@click.option('-H', 'voltage_low_critical', type=float, help='Low voltage critical level in V (default: 110).')
@click.option('-I', 'voltage_high_warning', type=float, help='High voltage warning level in V (default: 125).')
@click.option('-J', 'voltage_high_critical', type=float, help='High voltage critical level in V (default: 130).')
@click.option('--perfdata/--no-perfdata', default=True, help='Append Nagios performance data.')
@click.option('--verbose', '-v', is_flag=True, help='Log diagnostics and fetched variables to stderr.')
@click.pass_context
def app(ctx, host: str, community: Optional[str], port: Optional[int], timeout: Optional[float],
        check: str, perfdata: bool, verbose: bool, **threshold_options: Optional[float]):
    """
    Check the health of a UPS over SNMP (UPS-MIB, RFC 1628).

    Exit codes: 0 OK, 1 WARNING, 2 CRITICAL, 3 UNKNOWN.
    """
    setup_logging(level=logging.DEBUG if verbose else None)

    try:
        settings = get_settings()
        overrides: Dict[str, Optional[float]] = {
            name.upper(): value for name, value in threshold_options.items()
        }
        thresholds = settings.thresholds(overrides)
    except ConfigurationError as e:
        raise click.UsageError(str(e), ctx=ctx) from e

    category = CheckCategory(check.lower())
    fetcher = TelemetryFetcher(
        host=host,
        port=port if port is not None else settings.PORT,
        community=community if community is not None else settings.COMMUNITY,
        timeout=timeout if timeout is not None else settings.TIMEOUT,
    )
    logger.debug("Running %s check against %s:%s", category.value, fetcher.host, fetcher.port)

    result = _probe(fetcher, category, thresholds, verbose)
    click.echo(result.render(with_perfdata=perfdata))
    ctx.exit(result.exit_code)


def main() -> None:
    app(prog_name="upsprobe")


if __name__ == '__main__':
    main()
