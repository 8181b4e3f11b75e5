"""Unit tests for target resolution."""

import json
from pathlib import Path
from typing import Any

import pytest
import requests

from cmcli.config import TargetConfig, read_config, write_config
from cmcli.errors import INVALID_TARGET_MESSAGE, TargetValidationError
from cmcli.target import (
    fetch_info,
    get_target,
    is_insecure,
    normalize_target_url,
    resolve_target,
)

from .test_utils import INFO_BODY, MockResponse, make_session


class TestNormalizeTargetUrl:
    """Tests for scheme handling."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("example.com", "https://example.com"),
            ("127.0.0.1:8844", "https://127.0.0.1:8844"),
            ("localhost:9000", "https://localhost:9000"),
            ("credhub.example.com/path", "https://credhub.example.com/path"),
        ],
    )
    def test_no_scheme_defaults_to_https(self, raw: str, expected: str) -> None:
        """Hosts without a scheme are assumed to need TLS."""
        assert normalize_target_url(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        ["http://example.com", "https://example.com:8844", "HTTP://Example.com"],
    )
    def test_explicit_scheme_is_kept(self, raw: str) -> None:
        """An explicit scheme is preserved verbatim."""
        assert normalize_target_url(raw) == raw

    def test_whitespace_and_trailing_slash(self) -> None:
        """Surrounding whitespace and trailing slashes are dropped."""
        assert normalize_target_url("  https://example.com/  ") == "https://example.com"

    @pytest.mark.parametrize("raw", ["", "   ", "/"])
    def test_blank(self, raw: str) -> None:
        """A blank target is rejected."""
        with pytest.raises(ValueError):
            normalize_target_url(raw)

    def test_is_insecure(self) -> None:
        """Only plain http is insecure."""
        assert is_insecure("http://example.com")
        assert is_insecure("HTTP://example.com")
        assert not is_insecure("https://example.com")


class TestFetchInfo:
    """Tests for the /info probe."""

    def test_probe_request(self) -> None:
        """The probe is a GET to /info without certificate verification."""
        session = make_session(MockResponse(INFO_BODY))

        info = fetch_info("https://example.com:8844", session)

        session.get.assert_called_once()
        args, kwargs = session.get.call_args
        assert args[0] == "https://example.com:8844/info"
        assert kwargs["verify"] is False
        assert info.app_version == "0.1.0 build DEV"
        assert info.app_name == "Pivotal Credential Manager"
        assert info.auth_server.url == "https://example.com"
        assert info.auth_server.client_id == "bar"

    def test_default_client_skips_tls_validation(self, monkeypatch: Any) -> None:
        """Without an explicit session a non-verifying one is built."""
        session = make_session(MockResponse(INFO_BODY))
        calls = []

        def fake_new_http_client(skip_tls_validation: bool = False) -> Any:
            calls.append(skip_tls_validation)
            return session

        monkeypatch.setattr("cmcli.target.new_http_client", fake_new_http_client)

        fetch_info("https://example.com")

        assert calls == [True]

    @pytest.mark.parametrize("status", [201, 301, 404, 500])
    def test_non_200_status(self, status: int) -> None:
        """Anything but 200 fails validation."""
        session = make_session(MockResponse(INFO_BODY, status_code=status))

        with pytest.raises(TargetValidationError, match=INVALID_TARGET_MESSAGE):
            fetch_info("https://example.com", session)

    def test_network_failure(self) -> None:
        """Transport failures fail validation."""
        session = make_session(exc=requests.ConnectionError("refused"))

        with pytest.raises(TargetValidationError):
            fetch_info("https://example.com", session)

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "not json",
            "[]",
            json.dumps({"app": {"version": "1", "name": "x"}}),
            json.dumps({"auth-server": {"url": "", "client": "bar"}}),
            json.dumps({"auth-server": "https://example.com"}),
        ],
    )
    def test_incomplete_body(self, text: str) -> None:
        """Bodies without an auth server URL fail validation."""
        session = make_session(MockResponse(text=text))

        with pytest.raises(TargetValidationError):
            fetch_info("https://example.com", session)


class TestResolveTarget:
    """Tests for resolve_target."""

    def test_persists_target(self, config_path: Path) -> None:
        """A valid probe persists the API and auth URLs."""
        session = make_session(MockResponse(INFO_BODY))

        target = resolve_target("https://api.example.com:8844", session)

        assert target == TargetConfig(
            api_url="https://api.example.com:8844",
            auth_url="https://example.com",
            auth_client_id="bar",
        )
        assert read_config() == target
        assert get_target() == target

    def test_scheme_less_target_probes_https(self) -> None:
        """A bare host:port is probed and stored over https."""
        session = make_session(MockResponse(INFO_BODY))

        target = resolve_target("127.0.0.1:8844", session)

        assert session.get.call_args[0][0] == "https://127.0.0.1:8844/info"
        assert target.api_url == "https://127.0.0.1:8844"

    def test_http_target_is_kept(self) -> None:
        """An explicit http target is not upgraded."""
        session = make_session(MockResponse(INFO_BODY))

        target = resolve_target("http://api.example.com", session)

        assert target.api_url == "http://api.example.com"
        assert session.get.call_args[0][0] == "http://api.example.com/info"

    def test_idempotent(self, config_path: Path) -> None:
        """Resolving the same target twice stores the same record."""
        resolve_target("https://api.example.com", make_session(MockResponse(INFO_BODY)))
        first = config_path.read_bytes()

        resolve_target("https://api.example.com", make_session(MockResponse(INFO_BODY)))

        assert config_path.read_bytes() == first

    def test_failure_leaves_config_untouched(self, config_path: Path) -> None:
        """A failed probe does not modify the stored file."""
        write_config(TargetConfig(api_url="https://good.example.com", auth_url="https://uaa"))
        before = config_path.read_bytes()
        session = make_session(MockResponse(status_code=404, text=""))

        with pytest.raises(TargetValidationError):
            resolve_target("https://bad.example.com", session)

        assert config_path.read_bytes() == before

    def test_failure_without_previous_target(self, config_path: Path) -> None:
        """A failed first resolution creates no file."""
        session = make_session(exc=requests.ConnectionError("refused"))

        with pytest.raises(TargetValidationError):
            resolve_target("https://bad.example.com", session)

        assert not config_path.exists()

    def test_blank_target(self) -> None:
        """A blank target never reaches the network."""
        session = make_session(MockResponse(INFO_BODY))

        with pytest.raises(ValueError):
            resolve_target("  ", session)

        session.get.assert_not_called()
