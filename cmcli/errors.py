"""Error types raised by cm-cli.

Raw ``requests`` exceptions never cross the repository or target resolver
boundary; they are re-raised as one of the classes below so the CLI layer can
render a consistent message and exit code.

Hierarchy:
    CmCliError
    ├── NetworkError
    ├── ApiError
    ├── TargetValidationError
    └── ConfigError
"""

import json
from typing import Optional

from requests import Response

INVALID_TARGET_MESSAGE = "The targeted API does not appear to be valid."


class CmCliError(Exception):
    """Base class for all cm-cli errors."""


class NetworkError(CmCliError):
    """No response was obtained from the server."""

    def __init__(self, message: str = "") -> None:
        """Initialize with an optional detail message."""
        super().__init__(
            message or "No response received from the API. Check your network connection."
        )


class ApiError(CmCliError):
    """The server responded with a status outside 2xx."""

    def __init__(
        self, status_code: int, error: str = "", description: Optional[str] = None
    ) -> None:
        """Initialize with the HTTP status and the parsed error fields.

        Args:
            status_code: HTTP status code of the response
            error: Short error identifier or message from the body
            description: Longer description, when the API supplied one
        """
        self.status_code = status_code
        self.error = error
        self.description = description
        super().__init__(self._render())

    def _render(self) -> str:
        message = self.error or f"HTTP {self.status_code}"
        if self.description:
            message = f"{message}: {self.description}"
        return message

    @classmethod
    def from_response(cls, response: Response) -> "ApiError":
        """Parse the API's structured error body.

        Accepts ``{"error": ..., "error_description": ...}`` and the
        ``{"message": ...}`` variant; anything else falls back to the raw body
        text, then to the HTTP reason phrase.
        """
        text = response.text or ""
        try:
            data = json.loads(text)
        except ValueError:
            data = None

        if isinstance(data, dict):
            error = data.get("error") or data.get("message") or ""
            description = data.get("error_description") or data.get("description")
            if isinstance(error, dict):
                # {"error": {"message": ...}}
                description = description or error.get("description")
                error = error.get("message") or error.get("name") or ""
            if error or description:
                return cls(response.status_code, str(error), description and str(description))

        return cls(response.status_code, text.strip() or (response.reason or ""))


class TargetValidationError(CmCliError):
    """The probed server is not a usable credential-management API."""

    def __init__(self, message: str = INVALID_TARGET_MESSAGE) -> None:
        """Initialize with the fixed user-facing message."""
        super().__init__(message)


class ConfigError(CmCliError):
    """The local configuration could not be used or saved."""
