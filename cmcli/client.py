"""HTTP transport configuration for cm-cli."""

import os
from typing import Any, Dict, Optional

import requests

from .config import read_config
from .errors import ConfigError
from .utils import get_version


def get_ssl_verify() -> bool:
    """Return SSL verification setting from environment variable. Defaults to True."""
    env = os.environ.get("CM_SSL_VERIFY")
    if env is not None:
        return env.lower() not in ("0", "false", "no")
    return True


def new_http_client(skip_tls_validation: bool = False) -> requests.Session:
    """Return a session used to talk to the API.

    Args:
        skip_tls_validation: Do not verify the server certificate. Only the
            first-contact ``/info`` probe asks for this.
    """
    session = requests.Session()
    session.verify = False if skip_tls_validation else get_ssl_verify()
    session.headers["User-Agent"] = f"cm-cli/{get_version()}"
    return session


def new_request(
    method: str,
    path: str,
    payload: Optional[Dict[str, Any]] = None,
    params: Optional[Dict[str, str]] = None,
    api_url: Optional[str] = None,
) -> requests.Request:
    """Build a request against the targeted API.

    Args:
        method: HTTP method (GET, PUT, POST, DELETE)
        path: Path below the API URL, e.g. ``/api/v1/data``
        payload: Optional JSON body
        params: Optional query parameters
        api_url: Base URL; defaults to the persisted target

    Raises:
        ConfigError: If no API URL was given and none is targeted
    """
    if api_url is None:
        target = read_config()
        if target is None:
            raise ConfigError("No API targeted. Run 'cm api <SERVER_URL>' first.")
        api_url = target.api_url

    headers = {"Accept": "application/json"}
    if payload is not None:
        headers["Content-Type"] = "application/json"

    return requests.Request(
        method=method.upper(),
        url=f"{api_url.rstrip('/')}/{path.lstrip('/')}",
        headers=headers,
        json=payload,
        params=params,
    )
