#!/usr/bin/env python3
"""
Command line entry point: show the essential content of a URL.

Usage:
  essence [OPTIONS] URL

Options:
  -f, --config PATH   TOML (or YAML/JSON) configuration file
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Also write logs to this file
  --version, -v       Show the essence version

Example:
  essence -f ~/.config/essence.toml https://pastebin.com/abc123
"""
import sys
from pathlib import Path

import click

from essence import __version__
from essence.config import load_config
from essence.engine import show_url
from essence.errors import EssenceError, ViewerExitError
from essence.logger import init_logging
from essence.sandbox import DEFAULT_PROMISES, LOG_FILE_PROMISES, restrict

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg="red", err=True)
    sys.exit(1)


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "--version", "-v", message="essence, version %(version)s")
@click.option(
    "--config",
    "-f",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Configuration file (TOML, YAML or JSON).",
)
@click.option(
    "--log-level",
    "log_level",
    default="WARNING",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Logging level",
)
@click.option(
    "--log-file",
    "log_file",
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help="Also write logs to this file",
)
@click.argument("url")
def cli(config_path, log_level, log_file, url):
    """Show the essential content of URL with a local viewer."""
    init_logging(level=log_level, log_file=log_file)
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f"Failed to load configuration: {e}")

    try:
        restrict(DEFAULT_PROMISES + LOG_FILE_PROMISES if log_file else DEFAULT_PROMISES)
    except OSError as e:
        print_error(f"Failed to restrict capabilities: {e}")

    try:
        code = show_url(cfg, url)
    except ViewerExitError as e:
        # propagate the viewer's own status
        sys.exit(e.code)
    except EssenceError as e:
        print_error(str(e))
    sys.exit(code)


def main():
    cli()


if __name__ == "__main__":
    main()
