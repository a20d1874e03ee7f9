"""
Exception taxonomy for buddy_oidc_login.

Every failure that reaches the process boundary is a LoginError subclass
carrying a single human-readable message and the ErrorKind it maps to.
"""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classification of a failed login step"""
    CONFIG_ERROR = "config_error"
    TRANSPORT_ERROR = "transport_error"
    HTTP_ERROR = "http_error"
    PROTOCOL_ERROR = "protocol_error"
    OUTPUT_ERROR = "output_error"
    ID_TOKEN_ERROR = "id_token_error"


class LoginError(Exception):
    """Base class for all login failures. Only subclasses carry an ErrorKind."""

    error_kind: Optional[ErrorKind] = None


class ConfigError(LoginError):
    """Raised when inputs are missing, inconsistent or malformed."""

    error_kind = ErrorKind.CONFIG_ERROR


class TransportError(LoginError):
    """Raised when the exchange endpoint could not be reached after all attempts."""

    error_kind = ErrorKind.TRANSPORT_ERROR


class HttpError(LoginError):
    """Raised when the exchange endpoint answered with a non-2xx status."""

    error_kind = ErrorKind.HTTP_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProtocolError(LoginError):
    """Raised when a 2xx response body does not contain a token."""

    error_kind = ErrorKind.PROTOCOL_ERROR


class OutputError(LoginError):
    """Raised when the final token or endpoint is empty."""

    error_kind = ErrorKind.OUTPUT_ERROR


class IdTokenError(LoginError):
    """Raised when the CI runner cannot mint a federated identity token."""

    error_kind = ErrorKind.ID_TOKEN_ERROR


_ERRORS_BY_KIND = {
    ErrorKind.CONFIG_ERROR: ConfigError,
    ErrorKind.TRANSPORT_ERROR: TransportError,
    ErrorKind.HTTP_ERROR: HttpError,
    ErrorKind.PROTOCOL_ERROR: ProtocolError,
    ErrorKind.OUTPUT_ERROR: OutputError,
    ErrorKind.ID_TOKEN_ERROR: IdTokenError,
}


def error_for_kind(kind: ErrorKind, message: str, status_code: Optional[int] = None) -> LoginError:
    """
    Build the exception matching an ErrorKind.

    Args:
        kind: Failure classification
        message: Human-readable message
        status_code: HTTP status, only kept for HttpError

    Returns:
        LoginError subclass instance
    """
    if kind == ErrorKind.HTTP_ERROR:
        return HttpError(message, status_code=status_code)
    return _ERRORS_BY_KIND[kind](message)
