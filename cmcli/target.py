"""Discovery, validation and persistence of the targeted API.

A target is accepted only after ``GET <url>/info`` answers 200 with an info
document naming an auth server. The probe does not verify the server
certificate: the client has no trust anchor for a server it has never seen,
so first contact is trust-on-first-use. Later calls go through a verifying
session (see ``client.new_http_client``).
"""

import re
import warnings
from typing import Optional

import requests
from urllib3.exceptions import InsecureRequestWarning

from .client import new_http_client
from .config import TargetConfig, read_config, write_config
from .errors import TargetValidationError
from .models import InfoResponse

INSECURE_HTTP_WARNING = (
    "Warning: Insecure HTTP API detected. Data sent to this API could be intercepted"
    " in transit by third parties. Secure HTTPS API endpoints are recommended."
)

PROBE_TIMEOUT = 10

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")


def normalize_target_url(raw_target: str) -> str:
    """Return the base API URL for a user-supplied host or URL.

    A scheme given by the user is kept as is. Without one, ``https`` is
    assumed; ``host:port`` counts as having no scheme.

    Raises:
        ValueError: If ``raw_target`` is blank
    """
    target = raw_target.strip().rstrip("/")
    if not target:
        raise ValueError("Server URL cannot be empty.")
    if _SCHEME_RE.match(target):
        return target
    return f"https://{target}"


def is_insecure(api_url: str) -> bool:
    """Return True when ``api_url`` uses plain HTTP."""
    return api_url.lower().startswith("http://")


def fetch_info(api_url: str, http_client: Optional[requests.Session] = None) -> InfoResponse:
    """Probe ``<api_url>/info`` and decode the answer.

    Args:
        api_url: Base URL returned by normalize_target_url
        http_client: Session to use; a non-verifying one is created if omitted

    Raises:
        TargetValidationError: On transport failure, a non-200 status, or an
            info document without an auth server URL
    """
    if http_client is None:
        http_client = new_http_client(skip_tls_validation=True)

    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", InsecureRequestWarning)
            resp = http_client.get(f"{api_url}/info", timeout=PROBE_TIMEOUT, verify=False)
    except requests.RequestException as exc:
        raise TargetValidationError() from exc

    if resp.status_code != 200:
        raise TargetValidationError()

    return InfoResponse.from_text(resp.text)


def resolve_target(
    raw_target: str, http_client: Optional[requests.Session] = None
) -> TargetConfig:
    """Validate ``raw_target`` and make it the persisted target.

    The stored configuration is only written once the probe has passed, so a
    failed resolution keeps the previous target active.

    Args:
        raw_target: Host, host:port, or URL typed by the user
        http_client: Session used for the probe

    Returns:
        The newly persisted target

    Raises:
        ValueError: If ``raw_target`` is blank
        TargetValidationError: If the server is not a valid API
        ConfigError: If the configuration could not be saved
    """
    api_url = normalize_target_url(raw_target)
    info = fetch_info(api_url, http_client)

    target = TargetConfig(
        api_url=api_url,
        auth_url=info.auth_server.url,
        auth_client_id=info.auth_server.client_id,
    )
    write_config(target)
    return target


def get_target() -> Optional[TargetConfig]:
    """Return the persisted target without contacting it."""
    return read_config()
