"""Unit test configuration.

Points the config store at a per-test temporary file and blocks real HTTP so
no test can reach the network or the user's own configuration.
"""

from pathlib import Path
from typing import Any

import pytest
import requests


@pytest.fixture(autouse=True)
def config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect the config file into the test's temporary directory."""
    path = tmp_path / "cm" / "config.json"
    monkeypatch.setenv("CM_CONFIG", str(path))
    monkeypatch.delenv("CM_SSL_VERIFY", raising=False)
    return path


@pytest.fixture(autouse=True)
def block_network(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fail any request that was not routed to a mock session."""

    def refuse(*args: Any, **kwargs: Any) -> None:
        raise requests.ConnectionError("network access disabled in unit tests")

    monkeypatch.setattr("requests.Session.send", refuse)
