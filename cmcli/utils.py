"""Shared utility functions for cm-cli."""

import sys
import tomllib
from importlib import metadata
from pathlib import Path

import click

from .errors import ApiError, CmCliError, NetworkError


class ExitCodes:
    """Standard exit codes for CLI operations."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    INVALID_INPUT = 2
    NOT_FOUND = 3
    PERMISSION_DENIED = 4
    NETWORK_ERROR = 5


def get_version() -> str:
    """Get version from installed package metadata or pyproject.toml (development)."""
    try:
        return metadata.version("cm-cli")
    except metadata.PackageNotFoundError:
        # Fall back to reading pyproject.toml (works in a source checkout)
        try:
            pyproject_path = Path(__file__).parent.parent / "pyproject.toml"

            with open(pyproject_path, "rb") as f:
                pyproject_data = tomllib.load(f)

            return pyproject_data["tool"]["poetry"]["version"]
        except (OSError, KeyError, tomllib.TOMLDecodeError):
            return "unknown"


def handle_api_error(exc: CmCliError) -> None:
    """Report a classified error on stderr and exit with the matching code.

    Args:
        exc: The error raised by the repository or the target resolver
    """
    if isinstance(exc, NetworkError):
        click.echo(f"✗ Network error: {exc}", err=True)
        sys.exit(ExitCodes.NETWORK_ERROR)
    elif isinstance(exc, ApiError) and exc.status_code == 404:
        click.echo(f"✗ Resource not found: {exc}", err=True)
        sys.exit(ExitCodes.NOT_FOUND)
    elif isinstance(exc, ApiError) and exc.status_code in (401, 403):
        click.echo(f"✗ Permission denied: {exc}", err=True)
        sys.exit(ExitCodes.PERMISSION_DENIED)
    else:
        click.echo(f"✗ Error: {exc}", err=True)
        sys.exit(ExitCodes.GENERAL_ERROR)
