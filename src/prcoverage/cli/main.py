"""prcoverage CLI - prcov command."""

import click

from prcoverage.cli.check import check_command
from prcoverage.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="prcov")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """prcoverage - gate pull requests on coverage of new code."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "INFO")


cli.add_command(check_command, name="check")


if __name__ == "__main__":
    cli()
