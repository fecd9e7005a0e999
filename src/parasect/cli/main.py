"""Command line entry point for parasect."""

import logging
import sys

import click

from parasect import __version__
from parasect.constants import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_SUBSTITUTION_STRING,
    LOG_FORMAT,
    LOG_LEVELS,
)
from parasect.exceptions import ConfigurationError, InvariantViolation, SpawnError
from parasect.models.command import CommandTemplate
from parasect.models.search import SearchRange
from parasect.services.search_service import default_parallelism, parasect
from parasect.ui.dashboard import Dashboard
from parasect.ui.line_reporter import LineReporter
from parasect.ui.reporter import Reporter, result_lines

logger = logging.getLogger(__name__)


def make_reporter(search_range: SearchRange, template: CommandTemplate, no_tty: bool) -> Reporter:
    """Pick the dashboard for terminals and the line log for everything else."""
    if not no_tty and sys.stdout.isatty():
        return Dashboard(template.highlighted(), search_range)
    return LineReporter(search_range)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, prog_name="parasect")
@click.option("-x", "--low", type=int, required=True, help="The lowest number to search, inclusive")
@click.option("-y", "--high", type=int, required=True, help="The highest number to search, inclusive")
@click.option(
    "-j",
    "--max-parallelism",
    type=int,
    default=None,
    help="Maximum processes to run at once (default: number of logical CPUs)",
)
@click.option("-t", "--no-tty", is_flag=True, help="Print a stream of logs instead of the dashboard")
@click.option(
    "-s",
    "--substitution-string",
    default=DEFAULT_SUBSTITUTION_STRING,
    help=f"String replaced with the current number (default: {DEFAULT_SUBSTITUTION_STRING})",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=DEFAULT_LOG_LEVEL,
    help=f"Diagnostic log level on stderr (default: {DEFAULT_LOG_LEVEL})",
)
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
def main(low, high, max_parallelism, no_tty, substitution_string, log_level, command):
    """Find where COMMAND goes from good (exit 0) to bad (exit != 0), in parallel.

    Example: parasect --low=50 --high=100 -- ./test-script.sh --revision='$X'

    Put the command after `--` and quote `$X` so the shell leaves it alone.
    The command must succeed for a prefix of [low, high] and fail for the
    rest; otherwise the result is unspecified.
    """
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT, stream=sys.stderr)

    try:
        search_range = SearchRange(low=low, high=high)
        search_range.validate()
        template = CommandTemplate(command, substitution_string)
        if max_parallelism is None:
            max_parallelism = default_parallelism()
        if max_parallelism < 1:
            raise ConfigurationError(
                "The max parallelism cannot be 0. Specify a value >= 1 for --max-parallelism"
            )
    except ConfigurationError as e:
        raise click.ClickException(str(e))

    logger.info(f"Parasecting {template!r} over [{low}, {high}] with {max_parallelism} slot(s)")

    try:
        with make_reporter(search_range, template, no_tty) as reporter:
            result = parasect(search_range, template, max_parallelism, on_event=reporter)
    except SpawnError as e:
        raise click.ClickException(f"Subprocess error: {e}")
    except InvariantViolation as e:
        raise click.ClickException(f"Inconsistent results from subprocess: {e}")
    except Exception as e:
        raise click.ClickException(str(e))

    for line in result_lines(template, result):
        click.echo(line)


if __name__ == "__main__":
    main()
