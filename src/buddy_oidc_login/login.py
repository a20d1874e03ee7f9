"""
Login orchestration.

resolve -> (static key | fetch ID token -> exchange) -> final check -> export
"""
import logging
from typing import Optional

from .actions import ActionsOutput
from .client import TokenExchangeClient
from .errors import OutputError
from .id_token import BaseIdTokenSource, GithubIdTokenSource
from .resolver import resolve
from .types import AuthInput, FederatedExchange, LoginResult, ResolvedConfig, StaticKey

logger = logging.getLogger(__name__)


def finalize(token: Optional[str], endpoint: Optional[str]) -> LoginResult:
    """
    Trim and check the final token and endpoint.

    Raises:
        OutputError: If either is empty after trimming
    """
    token = (token or "").strip()
    endpoint = (endpoint or "").strip()
    if not token:
        raise OutputError("Resolved Buddy token is empty.")
    if not endpoint:
        raise OutputError("Resolved Buddy API endpoint is empty.")
    return LoginResult(token=token, endpoint=endpoint)


async def obtain_token(
    config: ResolvedConfig,
    output: ActionsOutput,
    id_token_source: Optional[BaseIdTokenSource] = None,
    client: Optional[TokenExchangeClient] = None,
) -> str:
    """
    Produce the access token for a resolved configuration.

    The exchange client is never constructed or called for a static key.

    Raises:
        LoginError: On any failure
    """
    method = config.method

    if isinstance(method, StaticKey):
        logger.info("Using static api_key, skipping OIDC token exchange")
        token = method.value.get_secret_value()
        output.add_mask(token)
        return token

    if not isinstance(method, FederatedExchange):
        raise TypeError(f"Unsupported authentication method: {type(method).__name__}")

    source = id_token_source or GithubIdTokenSource(mask=output.add_mask)
    jwt = await source.get_id_token(method.audience)
    output.add_mask(jwt)

    exchange_client = client or TokenExchangeClient(debug=config.debug, mask=output.add_mask)
    outcome = await exchange_client.exchange(config.endpoint, method.provider_id, jwt)
    return outcome.unwrap()


async def login(
    raw: AuthInput,
    output: ActionsOutput,
    id_token_source: Optional[BaseIdTokenSource] = None,
    client: Optional[TokenExchangeClient] = None,
) -> LoginResult:
    """
    Resolve inputs and obtain the final token/endpoint pair.

    Args:
        raw: Raw inputs
        output: Output boundary used for secret masking
        id_token_source: Federated token source (default: GitHub runner)
        client: Exchange client (default: built from the resolved config)

    Returns:
        LoginResult with trimmed, non-empty token and endpoint

    Raises:
        LoginError: On any failure
    """
    config = resolve(raw)
    token = await obtain_token(config, output, id_token_source, client)
    result = finalize(token, config.endpoint)
    output.add_mask(result.token)
    logger.debug(f"login: {result!r}")
    return result


async def run(
    raw: AuthInput,
    output: Optional[ActionsOutput] = None,
    id_token_source: Optional[BaseIdTokenSource] = None,
    client: Optional[TokenExchangeClient] = None,
) -> LoginResult:
    """Log in and export the result through the output boundary."""
    output = output or ActionsOutput()
    result = await login(raw, output, id_token_source, client)
    output.export_login(result.token, result.endpoint)
    return result
