"""Value types decoded from API responses."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Optional

from .errors import TargetValidationError


@dataclass(frozen=True)
class AuthServer:
    """Authentication server advertised by the API."""

    url: str
    client_id: str = ""


@dataclass(frozen=True)
class InfoResponse:
    """Body of ``GET /info``."""

    app_name: str
    app_version: str
    auth_server: AuthServer

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InfoResponse":
        """Create an InfoResponse from the decoded JSON document.

        Raises:
            TargetValidationError: If the document has no auth server URL
        """
        app = data.get("app")
        if not isinstance(app, dict):
            app = {}
        auth = data.get("auth-server")
        if not isinstance(auth, dict):
            auth = {}

        url = auth.get("url")
        if not isinstance(url, str) or not url.strip():
            raise TargetValidationError()

        client = auth.get("client")
        return cls(
            app_name=str(app.get("name") or ""),
            app_version=str(app.get("version") or ""),
            auth_server=AuthServer(url=url, client_id=client if isinstance(client, str) else ""),
        )

    @classmethod
    def from_text(cls, text: str) -> "InfoResponse":
        """Decode a raw response body; strict, unlike SecretBody."""
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise TargetValidationError() from exc
        if not isinstance(data, dict):
            raise TargetValidationError()
        return cls.from_dict(data)


@dataclass
class SecretBody(Mapping[str, Any]):
    """Decoded body of a secret operation.

    The shape belongs to the API, so the decoded object is kept whole and the
    accessors below only read the fields this client knows about. Missing
    fields read as None.
    """

    data: Dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)

    @property
    def id(self) -> Optional[str]:
        """Server-assigned identifier of this credential version."""
        return self.data.get("id")

    @property
    def name(self) -> Optional[str]:
        """Full credential name, e.g. ``/prod/db-password``."""
        return self.data.get("name")

    @property
    def content_type(self) -> Optional[str]:
        """Credential type (the ``type`` field), e.g. ``value`` or ``password``."""
        return self.data.get("type")

    @property
    def value(self) -> Any:
        """Secret value of a simple credential."""
        return self.data.get("value")

    @property
    def credential(self) -> Any:
        """Structured credential payload, e.g. certificate or SSH key parts."""
        return self.data.get("credential")

    @property
    def version_created_at(self) -> Optional[str]:
        """Timestamp at which this version was created."""
        return self.data.get("version_created_at")

    @classmethod
    def from_text(cls, text: Optional[str]) -> "SecretBody":
        """Decode a 2xx response body.

        Never raises: an empty body, malformed JSON, or a document that is not
        an object yields an empty SecretBody.
        """
        if not text:
            return cls()
        try:
            data = json.loads(text)
        except ValueError:
            return cls()
        if not isinstance(data, dict):
            return cls()
        return cls(data=data)
