"""cm entry points."""

import json
import sys
from typing import Any, Optional
from urllib.parse import quote

import click

from .client import new_http_client, new_request
from .config import check_config_file_permissions
from .errors import ApiError, ConfigError, NetworkError, TargetValidationError
from .repository import SecretRepository
from .ssl_trust import trust_source
from .target import INSECURE_HTTP_WARNING, get_target, is_insecure, resolve_target
from .utils import ExitCodes, get_version, handle_api_error

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.group(context_settings=CONTEXT_SETTINGS, invoke_without_command=True)
@click.option("--version", "-v", is_flag=True, help="Show version and exit")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """cm - Command-line interface for the Credential Manager API."""
    if version:
        click.echo(f"cm version {get_version()}")
        ctx.exit()
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command(hidden=True, name="_ca-info")
def ca_info() -> None:
    """Show TLS CA trust source (hidden diagnostic)."""
    click.echo(f"CA Source: {trust_source()}")


def _warn_if_config_too_open() -> None:
    warning = check_config_file_permissions()
    if warning:
        click.echo(f"⚠️  {warning}", err=True)


def _help_to_stderr(ctx: click.Context, param: click.Parameter, value: Any) -> None:
    """Print command help on stderr and fail, like any other misuse."""
    if not value or ctx.resilient_parsing:
        return
    click.echo(ctx.get_help(), err=True)
    ctx.exit(ExitCodes.GENERAL_ERROR)


@cli.command(context_settings=dict(help_option_names=[]))
@click.argument("server_url", required=False, metavar="SERVER_URL")
@click.option("--server", "-s", help="API URL to target (the SERVER_URL argument wins)")
@click.option(
    "--help",
    "-h",
    is_flag=True,
    expose_value=False,
    is_eager=True,
    callback=_help_to_stderr,
    help="Show this message and exit.",
)
def api(server_url: Optional[str], server: Optional[str]) -> None:
    """Get or set the targeted Credential Manager API.

    With SERVER_URL, the server's /info endpoint is checked and, if valid,
    saved as the target. A host without a scheme is assumed to be HTTPS.
    Without SERVER_URL, the current target is printed.
    """
    url = server_url or server

    if not url:
        target = get_target()
        if target is None:
            click.echo("No API targeted.", err=True)
            click.echo("Run 'cm api <SERVER_URL>' to set one.", err=True)
            sys.exit(ExitCodes.GENERAL_ERROR)
        _warn_if_config_too_open()
        click.echo(target.api_url)
        return

    try:
        target = resolve_target(url)
    except ValueError as exc:
        click.echo(f"✗ {exc}", err=True)
        sys.exit(ExitCodes.INVALID_INPUT)
    except TargetValidationError as exc:
        click.echo(str(exc), err=True)
        sys.exit(ExitCodes.GENERAL_ERROR)
    except ConfigError as exc:
        handle_api_error(exc)
        return

    click.echo(f"Setting the target url: {target.api_url}")
    if is_insecure(target.api_url):
        click.echo(INSECURE_HTTP_WARNING)


@cli.command()
@click.option("--name", "-n", required=True, help="Name of the credential to retrieve")
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
def get(name: str, format: str) -> None:
    """Retrieve a credential by name."""
    _warn_if_config_too_open()
    path = f"/api/v1/data/{quote(name.strip('/'), safe='/')}"
    try:
        request = new_request("GET", path)
        body = SecretRepository(new_http_client()).send_request(request)
    except (ConfigError, NetworkError, ApiError) as exc:
        handle_api_error(exc)
        return

    if format == "json":
        click.echo(json.dumps(dict(body), indent=2))
        return

    for key, value in body.items():
        if isinstance(value, (dict, list)):
            value = json.dumps(value, indent=2)
        click.echo(f"{key}: {value}")
