"""Main entry point for the rbacscope CLI.

Command Groups:
    rbacscope lookup: Principal lookups (user-details, serviceaccount-details,
        user-roles)

Example:
    $ rbacscope --help
    $ rbacscope --log-level debug lookup user-details alice --admin
"""

from __future__ import annotations

import sys
from importlib.metadata import version as get_version

import click

from rbacscope.cli.lookup import lookup
from rbacscope.cli.utils import ExitCode, error_exit
from rbacscope.config import load_config
from rbacscope.errors import ConfigurationError
from rbacscope.telemetry.logging import configure_logging


def _get_version() -> str:
    """Get the rbacscope package version.

    Returns:
        Version string from package metadata, or 'unknown' if not installed.
    """
    try:
        return get_version("rbacscope")
    except Exception:
        return "unknown"


@click.group(
    name="rbacscope",
    help="rbacscope - Resolve the Kubernetes RBAC grants of users and service accounts.",
    epilog="Use 'rbacscope <command> --help' for command-specific help.",
    context_settings={
        "help_option_names": ["-h", "--help"],
    },
)
@click.version_option(
    version=_get_version(),
    prog_name="rbacscope",
    message="%(prog)s %(version)s",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Minimum log level (default: $RBACSCOPE_LOG_LEVEL or INFO).",
)
@click.option(
    "--log-json/--no-log-json",
    default=None,
    help="Render logs as JSON lines.",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None, log_json: bool | None) -> None:
    """Root command group for the rbacscope CLI."""
    ctx.ensure_object(dict)
    try:
        config = load_config().merged(log_level=log_level, log_json=log_json)
    except ConfigurationError as e:
        error_exit(e.message, exit_code=ExitCode.VALIDATION_ERROR, **e.details)
    configure_logging(log_level=config.log_level, json_output=config.log_json)
    ctx.obj["config"] = config


cli.add_command(lookup)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the rbacscope CLI.

    Args:
        argv: Command-line arguments (uses sys.argv if None).
    """
    try:
        cli(args=argv, standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
