"""devman CLI entry point."""

import click

from . import __version__
from .commands import device
from .commands.common import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="devman")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
def cli(verbose: bool) -> None:
    """devman - enroll and manage SSH devices."""
    configure_logging(verbose)


cli.add_command(device)


if __name__ == "__main__":
    cli()
