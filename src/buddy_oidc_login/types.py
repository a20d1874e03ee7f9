"""
Type definitions for buddy_oidc_login.

AuthInput is the raw, untrusted configuration. Everything else is built
from it once by the resolver and stays immutable for the rest of the run.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, SecretStr

from .errors import ErrorKind, error_for_kind
from .logging_config import mask_sensitive
from .regions import DEFAULT_BASE_URL


def is_https_url(value: str) -> bool:
    """Return True if value parses as an absolute https:// URL."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme == "https" and bool(parsed.netloc) and not any(c.isspace() for c in value)


class AuthInput(BaseModel):
    """Raw configuration values as supplied by the host environment."""

    model_config = ConfigDict(frozen=True)

    api_key: Optional[SecretStr] = None
    provider_id: Optional[str] = None
    audience: Optional[str] = None
    api_url: Optional[str] = None
    region: Optional[str] = None
    debug: bool = False


# =============================================================================
# Authentication method
# =============================================================================


@dataclass(frozen=True)
class StaticKey:
    """Pre-provisioned API token; no exchange is performed."""

    value: SecretStr


@dataclass(frozen=True)
class FederatedExchange:
    """Exchange a federated identity token through an OIDC provider."""

    provider_id: str
    audience: Optional[str] = None


AuthMethod = Union[StaticKey, FederatedExchange]


# =============================================================================
# Endpoint source
# =============================================================================


@dataclass(frozen=True)
class ExplicitUrl:
    """Endpoint passed verbatim through the api_url input."""

    url: str


@dataclass(frozen=True)
class Region:
    """Endpoint looked up from the region table."""

    code: str
    url: str


@dataclass(frozen=True)
class DefaultEndpoint:
    """Endpoint used when neither api_url nor region is set."""

    url: str = DEFAULT_BASE_URL


EndpointSource = Union[ExplicitUrl, Region, DefaultEndpoint]


@dataclass(frozen=True)
class ResolvedConfig:
    """Validated configuration for a single login run."""

    method: AuthMethod
    endpoint_source: EndpointSource
    debug: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.method, (StaticKey, FederatedExchange)):
            raise error_for_kind(
                ErrorKind.CONFIG_ERROR,
                f"Unsupported authentication method: {type(self.method).__name__}",
            )
        if not is_https_url(self.endpoint_source.url):
            raise error_for_kind(
                ErrorKind.CONFIG_ERROR,
                f"Invalid API URL: {self.endpoint_source.url!r}. Must be a valid HTTPS URL.",
            )

    @property
    def endpoint(self) -> str:
        """Resolved API base URL."""
        return self.endpoint_source.url

    @property
    def uses_exchange(self) -> bool:
        """True when a federated token exchange is required."""
        return isinstance(self.method, FederatedExchange)


# =============================================================================
# Exchange protocol
# =============================================================================


@dataclass(frozen=True)
class ExchangeRequest:
    """POST body for the token exchange endpoint."""

    provider_id: str
    web_identity_token: str = field(repr=False)

    def to_json(self) -> Dict[str, Any]:
        """Return the wire representation."""
        return {
            "provider_id": self.provider_id,
            "web_identity_token": self.web_identity_token,
        }


@dataclass(frozen=True)
class Token:
    """Successful exchange outcome."""

    value: str = field(repr=False)
    attempts: int = 1

    ok = True

    def unwrap(self) -> str:
        """Return the token."""
        return self.value

    def __repr__(self) -> str:
        return f"Token(value={mask_sensitive(self.value)!r}, attempts={self.attempts})"


@dataclass(frozen=True)
class Failed:
    """Terminal exchange failure."""

    kind: ErrorKind
    detail: str
    status_code: Optional[int] = None
    attempts: int = 1

    ok = False

    def unwrap(self) -> str:
        """Raise the LoginError matching this failure."""
        raise error_for_kind(
            self.kind,
            f"Token exchange failed: {self.detail}",
            status_code=self.status_code,
        )


ExchangeOutcome = Union[Token, Failed]


@dataclass(frozen=True)
class LoginResult:
    """Final token and endpoint handed to the output boundary."""

    token: str = field(repr=False)
    endpoint: str

    def __repr__(self) -> str:
        return f"LoginResult(token={mask_sensitive(self.token)!r}, endpoint={self.endpoint!r})"
