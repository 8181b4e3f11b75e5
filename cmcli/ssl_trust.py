"""System certificate store integration.

Verified calls to the targeted API (everything except the first-contact
``/info`` probe) should trust the same roots as the operating system, which is
where corporate CAs usually live. ``truststore`` patches the ``requests``
stack to use the OS store instead of the bundled certifi file.

Environment Variables:
    CM_DISABLE_OS_TRUST=1  -> Skip injection entirely (use certifi)
    CM_FORCE_OS_TRUST=1    -> Raise on any injection failure
    CM_DEBUG_OS_TRUST=1    -> Print traceback on injection errors
"""

from __future__ import annotations

import os
import sys
import traceback

OS_TRUST_INJECTED: bool = False
OS_TRUST_REASON: str = "not-attempted"

__all__ = ["inject_os_trust", "trust_source", "OS_TRUST_INJECTED", "OS_TRUST_REASON"]


def inject_os_trust() -> None:
    """Inject the system certificate store via truststore.

    On failure the CLI keeps working with certifi, unless CM_FORCE_OS_TRUST
    asks for the error to propagate.
    """
    global OS_TRUST_INJECTED, OS_TRUST_REASON
    if os.environ.get("CM_DISABLE_OS_TRUST") == "1":
        OS_TRUST_INJECTED = False
        OS_TRUST_REASON = "disabled-env"
        return
    try:
        import truststore

        truststore.inject_into_ssl()
        OS_TRUST_INJECTED = True
        OS_TRUST_REASON = "injected:ssl"
    except Exception as exc:  # noqa: BLE001
        if os.environ.get("CM_FORCE_OS_TRUST") == "1":
            raise
        sys.stderr.write(
            f"[cm] Info: system trust store injection skipped: {exc.__class__.__name__}: {exc}.\n"
        )
        if os.environ.get("CM_DEBUG_OS_TRUST") == "1":
            traceback.print_exc()
        OS_TRUST_INJECTED = False
        OS_TRUST_REASON = f"error:{exc.__class__.__name__}"


def trust_source() -> str:
    """Describe where verified connections get their CA certificates."""
    if OS_TRUST_INJECTED:
        return f"system (reason={OS_TRUST_REASON})"
    verify_env = os.environ.get("REQUESTS_CA_BUNDLE") or os.environ.get("SSL_CERT_FILE")
    if verify_env:
        return f"custom-pem ({verify_env})"
    return f"certifi (reason={OS_TRUST_REASON})"
