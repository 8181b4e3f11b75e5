"""Entry point for the cm command-line client.

Performs system trust store injection (via truststore) before loading the CLI.
Environment controls:
    CM_DISABLE_OS_TRUST=1  -> skip injection
    CM_FORCE_OS_TRUST=1    -> raise if injection fails
    CM_DEBUG_OS_TRUST=1    -> show traceback on injection failure
"""

from __future__ import annotations

# Absolute import so the module also works when run as a standalone script
from cmcli.ssl_trust import inject_os_trust  # noqa: E402,I100,I202

# Inject before importing the CLI so requests-based modules see the patched SSL configuration.
inject_os_trust()

from cmcli.main import cli  # noqa: E402,I100,I202


def main() -> None:
    """Run the CLI."""
    cli()


if __name__ == "__main__":
    main()
