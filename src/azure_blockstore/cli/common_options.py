"""Common Typer options shared across CLI commands."""

import typer

from ..config import CONNECTION_STRING_ENV


def config_option(help_text: str = "Store configuration file (YAML)") -> typer.Option:
    """Create a standard configuration file option.

    Args:
        help_text: Custom help text

    Returns:
        Configured Typer Option
    """
    return typer.Option(
        None,
        "--config",
        "-c",
        help=help_text,
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    )


def container_option(help_text: str = "Container name (overrides config file)") -> typer.Option:
    """Create a container name option."""
    return typer.Option(None, "--container", help=help_text)


def connection_string_option() -> typer.Option:
    """Create a connection string option that falls back to the environment."""
    return typer.Option(
        None,
        "--connection-string",
        envvar=CONNECTION_STRING_ENV,
        help="Azure storage connection string",
        show_default=False,
    )
