"""
Credential resolver.

Turns raw AuthInput values into a ResolvedConfig: which authentication
method applies (static key or federated exchange) and which API endpoint
to talk to (explicit URL, region, or the default). No network access.

Resolution order:
    Method:   api_key > provider_id > error
    Endpoint: api_url > region > DEFAULT_BASE_URL
"""
import logging
import re
from typing import Optional

from pydantic import SecretStr

from .errors import ConfigError
from .logging_config import mask_sensitive
from .regions import get_region_url, normalize_region, supported_regions
from .types import (
    AuthInput,
    AuthMethod,
    DefaultEndpoint,
    EndpointSource,
    ExplicitUrl,
    FederatedExchange,
    Region,
    ResolvedConfig,
    StaticKey,
    is_https_url,
)

logger = logging.getLogger(__name__)


MAX_CREDENTIAL_LENGTH = 255
MAX_AUDIENCE_LENGTH = 255

# RFC 3986 unreserved characters plus common delimiters
AUDIENCE_PATTERN = re.compile(r"[A-Za-z0-9\-._~:/?#@!$&'()*+,;=]+")

UUID_LIKE_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)


def validate_static_key(api_key: SecretStr) -> StaticKey:
    """
    Validate a static API key.

    Only emptiness and length are checked; the key format itself is left
    to the Buddy API so new key formats keep working.

    Raises:
        ConfigError: If the key is empty or too long
    """
    value = api_key.get_secret_value().strip()
    if not value:
        raise ConfigError("Invalid api_key input. Must be a non-empty string.")
    if len(value) > MAX_CREDENTIAL_LENGTH:
        raise ConfigError(
            f"Invalid api_key input. Must be at most {MAX_CREDENTIAL_LENGTH} characters."
        )
    logger.debug(f"validate_static_key: Using static api_key (masked={mask_sensitive(value)})")
    return StaticKey(value=SecretStr(value))


def validate_provider_id(provider_id: str) -> str:
    """
    Validate an OIDC provider identifier.

    Raises:
        ConfigError: If the identifier is empty or too long
    """
    value = provider_id.strip()
    if not value:
        raise ConfigError("Invalid provider_id input. Must be a non-empty string.")
    if len(value) > MAX_CREDENTIAL_LENGTH:
        raise ConfigError(
            f"Invalid provider_id input. Must be at most {MAX_CREDENTIAL_LENGTH} characters."
        )
    if UUID_LIKE_PATTERN.fullmatch(value) and value != value.lower() and value != value.upper():
        logger.warning(
            "validate_provider_id: Provider ID contains mixed case. "
            "Consider using lowercase UUID format."
        )
    return value


def validate_audience(audience: Optional[str]) -> Optional[str]:
    """
    Validate the optional audience for the federated identity token.

    Raises:
        ConfigError: If the audience is empty, too long or has non URI-safe characters
    """
    if audience is None:
        return None
    if len(audience) == 0:
        raise ConfigError("Invalid audience input. Audience cannot be an empty string.")
    if len(audience) > MAX_AUDIENCE_LENGTH:
        raise ConfigError(
            f"Invalid audience input. Must be at most {MAX_AUDIENCE_LENGTH} characters."
        )
    if not AUDIENCE_PATTERN.fullmatch(audience):
        raise ConfigError(
            "Invalid audience input. Only alphanumeric and URI-safe characters are allowed."
        )
    return audience


def resolve_auth_method(raw: AuthInput) -> AuthMethod:
    """
    Decide the authentication method.

    Raises:
        ConfigError: If no method can be determined or the chosen one is invalid
    """
    if raw.api_key is not None:
        if raw.provider_id is not None:
            logger.info(
                "resolve_auth_method: Both api_key and provider_id are set, using api_key"
            )
        return validate_static_key(raw.api_key)

    if raw.provider_id is not None:
        provider_id = validate_provider_id(raw.provider_id)
        audience = validate_audience(raw.audience)
        logger.debug(
            f"resolve_auth_method: Using OIDC exchange provider_id='{provider_id}', "
            f"audience={audience!r}"
        )
        return FederatedExchange(provider_id=provider_id, audience=audience)

    raise ConfigError("Either api_key or provider_id input must be provided.")


def resolve_endpoint(raw: AuthInput) -> EndpointSource:
    """
    Decide the API base URL.

    Raises:
        ConfigError: If api_url is not an absolute HTTPS URL or region is unknown
    """
    if raw.api_url is not None:
        api_url = raw.api_url.strip()
        if not is_https_url(api_url):
            raise ConfigError("Invalid API URL format. Must be a valid HTTPS URL.")
        if raw.region is not None:
            logger.info("resolve_endpoint: Both api_url and region are set, using api_url")
        return ExplicitUrl(url=api_url)

    if raw.region is not None:
        url = get_region_url(raw.region)
        if url is None:
            raise ConfigError(
                f"Invalid region input: {raw.region}. "
                f"Must be one of {', '.join(supported_regions())}"
            )
        return Region(code=normalize_region(raw.region), url=url)

    logger.debug("resolve_endpoint: No api_url or region set, using default endpoint")
    return DefaultEndpoint()


def resolve(raw: AuthInput) -> ResolvedConfig:
    """
    Resolve raw inputs into a validated configuration.

    Args:
        raw: Raw inputs from the host environment

    Returns:
        Immutable ResolvedConfig

    Raises:
        ConfigError: If inputs are missing, inconsistent or malformed
    """
    method = resolve_auth_method(raw)
    endpoint_source = resolve_endpoint(raw)
    config = ResolvedConfig(method=method, endpoint_source=endpoint_source, debug=raw.debug)

    logger.debug(
        f"resolve: method={type(method).__name__}, "
        f"endpoint_source={type(endpoint_source).__name__}, endpoint='{config.endpoint}'"
    )
    return config
