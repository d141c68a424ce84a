import logging

import click

import myperms
from myperms.logger import GLOBAL_LOGGER as logger

# Indexed by the number of -v flags given
LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


@click.group(invoke_without_command=True, no_args_is_help=True)
@click.option(
    "-v", "--verbose", help="Increases log level with count, e.g -vv", count=True
)
@click.version_option(version=myperms.__version__, prog_name="myperms")
@click.pass_context
def cli(ctx, verbose):
    """Manage MySQL grants from a YAML spec file."""
    logger.setLevel(LOG_LEVELS[min(verbose, len(LOG_LEVELS) - 1)])

    ctx.ensure_object(dict)
