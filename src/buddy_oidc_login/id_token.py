"""
Federated identity token source.

On a GitHub Actions runner the job's OIDC token is requested from the URL
in ACTIONS_ID_TOKEN_REQUEST_URL, authenticated with the bearer token in
ACTIONS_ID_TOKEN_REQUEST_TOKEN. Both are only present when the workflow
grants `permissions: id-token: write`.

Failures are not retried here; they surface as IdTokenError.
"""
import logging
import os
from abc import ABC, abstractmethod
from typing import Callable, Mapping, Optional
from urllib.parse import quote

import httpx

from .errors import IdTokenError
from .logging_config import mask_sensitive

logger = logging.getLogger(__name__)


REQUEST_URL_ENV = "ACTIONS_ID_TOKEN_REQUEST_URL"
REQUEST_TOKEN_ENV = "ACTIONS_ID_TOKEN_REQUEST_TOKEN"
PERMISSION_HINT = 'Add "permissions: id-token: write" to your GitHub Actions workflow.'


class BaseIdTokenSource(ABC):
    """Mints the federated identity token for the current CI job."""

    @abstractmethod
    async def get_id_token(self, audience: Optional[str] = None) -> str:
        """
        Return a signed JWT for the current job.

        Args:
            audience: Optional 'aud' claim to request

        Raises:
            IdTokenError: If the token cannot be obtained
        """


def build_id_token_url(request_url: str, audience: Optional[str] = None) -> str:
    """Append the URL-encoded audience to the runner's token request URL."""
    if not audience:
        return request_url
    separator = "&" if "?" in request_url else "?"
    return f"{request_url}{separator}audience={quote(audience, safe='')}"


class GithubIdTokenSource(BaseIdTokenSource):
    """ID token source backed by the GitHub Actions runner."""

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        *,
        mask: Optional[Callable[[str], None]] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Args:
            environ: Environment mapping (default: os.environ)
            mask: Registers the minted token as a secret right after receipt
            timeout: Request timeout in seconds
            transport: Transport for the httpx client (tests)
        """
        self._environ = os.environ if environ is None else environ
        self._mask = mask
        self._timeout = timeout
        self._transport = transport

    def _require(self, name: str) -> str:
        value = self._environ.get(name, "")
        if not value:
            raise IdTokenError(f"Unable to get {name} env variable. {PERMISSION_HINT}")
        return value

    async def get_id_token(self, audience: Optional[str] = None) -> str:
        request_url = self._require(REQUEST_URL_ENV)
        request_token = self._require(REQUEST_TOKEN_ENV)
        url = build_id_token_url(request_url, audience)

        logger.debug(f"GithubIdTokenSource.get_id_token: Requesting ID token, audience={audience!r}")

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as http:
                response = await http.get(
                    url,
                    headers={
                        "Authorization": f"Bearer {request_token}",
                        "Accept": "application/json",
                    },
                )
        except httpx.HTTPError as error:
            raise IdTokenError(f"Failed to get ID Token. Error: {type(error).__name__}: {error}") from error

        if response.status_code != 200:
            raise IdTokenError(
                f"Failed to get ID Token. Error Code: {response.status_code}. "
                f"Error Message: {response.reason_phrase}"
            )

        try:
            value = response.json().get("value")
        except (ValueError, AttributeError) as error:
            raise IdTokenError("Failed to get ID Token. Response body is not a JSON object.") from error

        if not isinstance(value, str) or not value:
            raise IdTokenError("Response JSON body does not have an ID token value.")

        if self._mask is not None:
            self._mask(value)

        logger.debug(
            f"GithubIdTokenSource.get_id_token: Received ID token "
            f"(length={len(value)}, masked={mask_sensitive(value)})"
        )
        return value
