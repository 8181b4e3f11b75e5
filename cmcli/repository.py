"""Execution of secret requests against the targeted API."""

from typing import Union

import requests

from .errors import ApiError, NetworkError
from .models import SecretBody


class SecretRepository:
    """Send one request and classify its outcome.

    The repository keeps no state besides the transport, so a single instance
    can serve independent requests concurrently.
    """

    def __init__(self, http_client: requests.Session):
        """Initialize with the session used as transport.

        Args:
            http_client: Configured requests session
        """
        self.http_client = http_client

    def send_request(
        self, request: Union[requests.Request, requests.PreparedRequest]
    ) -> SecretBody:
        """Send ``request`` once and decode the response.

        Args:
            request: A request built by the caller. Unprepared requests are
                prepared through the session so its headers apply.

        Returns:
            The decoded body. A 2xx response whose body is not a JSON object
            decodes to an empty SecretBody.

        Raises:
            NetworkError: If the request could not be built or no response was obtained
            ApiError: If the response status is outside 2xx
        """
        try:
            if isinstance(request, requests.Request):
                request = self.http_client.prepare_request(request)

            settings = self.http_client.merge_environment_settings(
                request.url, {}, None, None, None
            )
        except requests.RequestException as exc:
            # Malformed URL, e.g. from a hand-edited config file
            raise NetworkError(f"Could not build request: {exc}") from exc

        try:
            response = self.http_client.send(request, **settings)
        except requests.RequestException as exc:
            raise NetworkError() from exc

        if response.status_code < 200 or response.status_code > 299:
            raise ApiError.from_response(response)

        return SecretBody.from_text(response.text)
