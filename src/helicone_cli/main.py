# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

"""Entry point for the ``helicone`` command."""

import click
from dotenv import load_dotenv

from . import __version__
from .commands import auth_group, metrics_group, requests_group, sessions_group
from .console import setup_logging


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Debug logging on stderr")
@click.version_option(__version__, prog_name="helicone")
def cli(verbose: bool):
    """Query, export and analyze Helicone request logs."""
    setup_logging(verbose)


cli.add_command(auth_group)
cli.add_command(requests_group)
cli.add_command(sessions_group)
cli.add_command(metrics_group)


def main():
    # Project-local .env never overrides the real environment
    load_dotenv(override=False)
    cli()


if __name__ == "__main__":
    main()
