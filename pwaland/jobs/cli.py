"""Entrypoint for the command line interface."""

import typer

from pwaland.configs.app_configs.config_logging import configure_logging
from pwaland.jobs.pwa_discovery import pwa_discovery_cmd

cli = typer.Typer(no_args_is_help=True, add_completion=False)

# Add the PWA discovery subcommands
cli.add_typer(pwa_discovery_cmd, no_args_is_help=True)


@cli.callback()
def setup():
    """CLI Entrypoint"""
    configure_logging()


if __name__ == "__main__":
    cli()
