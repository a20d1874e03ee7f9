"""
Exchange a CI OIDC identity token for a Buddy API access token.
"""
from .errors import (
    ErrorKind,
    LoginError,
    ConfigError,
    TransportError,
    HttpError,
    ProtocolError,
    OutputError,
    IdTokenError,
)
from .types import (
    AuthInput,
    AuthMethod,
    StaticKey,
    FederatedExchange,
    EndpointSource,
    ExplicitUrl,
    Region,
    DefaultEndpoint,
    ResolvedConfig,
    ExchangeRequest,
    ExchangeOutcome,
    Token,
    Failed,
    LoginResult,
)
from .regions import DEFAULT_BASE_URL, REGIONS
from .resolver import resolve
from .retry import RetryConfig, RetryEvent, DEFAULT_RETRY_CONFIG
from .client import TokenExchangeClient
from .id_token import BaseIdTokenSource, GithubIdTokenSource
from .actions import ActionsOutput
from .login import login, run


__all__ = [
    # Errors
    "ErrorKind",
    "LoginError",
    "ConfigError",
    "TransportError",
    "HttpError",
    "ProtocolError",
    "OutputError",
    "IdTokenError",
    # Types
    "AuthInput",
    "AuthMethod",
    "StaticKey",
    "FederatedExchange",
    "EndpointSource",
    "ExplicitUrl",
    "Region",
    "DefaultEndpoint",
    "ResolvedConfig",
    "ExchangeRequest",
    "ExchangeOutcome",
    "Token",
    "Failed",
    "LoginResult",
    # Resolution
    "DEFAULT_BASE_URL",
    "REGIONS",
    "resolve",
    # Exchange
    "RetryConfig",
    "RetryEvent",
    "DEFAULT_RETRY_CONFIG",
    "TokenExchangeClient",
    "BaseIdTokenSource",
    "GithubIdTokenSource",
    # Output
    "ActionsOutput",
    "login",
    "run",
]


__version__ = "1.0.0"
