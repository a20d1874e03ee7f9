"""
Token exchange client.

POSTs the federated identity token to {endpoint}/user/oidc/tokens and
turns the response into an ExchangeOutcome. Retries 5xx responses and
transport failures with exponential backoff; 4xx responses are terminal.
"""
import logging
import time
from typing import Awaitable, Callable, Optional

import httpx

from .errors import ErrorKind
from .logging_config import mask_sensitive
from .response_parser import extract_error_message, parse_token_body
from .retry import (
    DEFAULT_RETRY_CONFIG,
    RetryConfig,
    RetryEvent,
    RetryEventListener,
    async_sleep,
    calculate_backoff_delay,
    has_attempts_left,
    is_client_error_status,
    is_retryable_status,
    is_success_status,
)
from .types import ExchangeOutcome, ExchangeRequest, Failed, Token

logger = logging.getLogger(__name__)


EXCHANGE_PATH = "/user/oidc/tokens"
DEFAULT_TIMEOUT_SECONDS = 30.0

SleepFn = Callable[[float], Awaitable[None]]
MaskFn = Callable[[str], None]


def build_exchange_url(endpoint: str) -> str:
    """Join the API base URL and the exchange path."""
    return f"{endpoint.rstrip('/')}{EXCHANGE_PATH}"


def _no_mask(value: str) -> None:
    return None


class TokenExchangeClient:
    """
    Token Exchange Client

    One exchange per call, no connection reuse across calls. The debug
    flag only controls whether response bodies are written to the log.

    Example:
        client = TokenExchangeClient(mask=output.add_mask)
        outcome = await client.exchange(endpoint, provider_id, jwt)
        token = outcome.unwrap()
    """

    def __init__(
        self,
        *,
        config: Optional[RetryConfig] = None,
        debug: bool = False,
        mask: Optional[MaskFn] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        httpx_client: Optional[httpx.AsyncClient] = None,
        sleep: SleepFn = async_sleep,
    ) -> None:
        """
        Create a new TokenExchangeClient.

        Args:
            config: Retry configuration (default: 3 attempts, 1s base delay)
            debug: Log response bodies at DEBUG level
            mask: Registers secret values with the output boundary
            timeout: Per-request timeout in seconds
            transport: Transport for the internally created httpx client
            httpx_client: Externally managed client; not closed by this class
            sleep: Backoff sleep coroutine
        """
        self._config = config or DEFAULT_RETRY_CONFIG
        self._debug = debug
        self._mask = mask or _no_mask
        self._timeout = timeout
        self._transport = transport
        self._httpx_client = httpx_client
        self._sleep = sleep
        self._listeners: list[RetryEventListener] = []

    @property
    def config(self) -> RetryConfig:
        """Get the retry configuration."""
        return self._config

    @property
    def debug(self) -> bool:
        """Whether response bodies are logged."""
        return self._debug

    def on(self, listener: RetryEventListener) -> Callable[[], None]:
        """
        Add a retry event listener.

        Returns:
            Function to remove the listener
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    def _emit(self, event: RetryEvent) -> None:
        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                logger.debug(
                    f"TokenExchangeClient._emit: Listener failed for {event.type}",
                    exc_info=True,
                )

    async def exchange(
        self,
        endpoint: str,
        provider_id: str,
        federated_token: str,
    ) -> ExchangeOutcome:
        """
        Exchange a federated identity token for an API token.

        Args:
            endpoint: API base URL
            provider_id: OIDC provider identifier
            federated_token: JWT minted by the CI runner

        Returns:
            Token on success, Failed otherwise. Never raises for HTTP,
            transport or body-format failures.
        """
        request = ExchangeRequest(provider_id=provider_id, web_identity_token=federated_token)
        url = build_exchange_url(endpoint)
        logger.info(f"Exchanging OIDC token with Buddy at {url}")

        if self._httpx_client is not None:
            return await self._exchange_with(self._httpx_client, url, request)

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as http:
            return await self._exchange_with(http, url, request)

    async def _exchange_with(
        self,
        http: httpx.AsyncClient,
        url: str,
        request: ExchangeRequest,
    ) -> ExchangeOutcome:
        start_time = time.monotonic()
        attempt = 0

        while True:
            attempt += 1
            self._emit(RetryEvent(type="attempt:start", attempt=attempt, data={"url": url}))

            try:
                response = await http.post(
                    url,
                    json=request.to_json(),
                    headers={"Content-Type": "application/json"},
                )
            except httpx.TransportError as error:
                detail = f"{type(error).__name__}: {error}" if str(error) else type(error).__name__
                will_retry = has_attempts_left(attempt, self._config)
                logger.warning(
                    f"TokenExchangeClient.exchange: Attempt {attempt}/{self._config.max_attempts} "
                    f"failed with transport error ({detail}), will_retry={will_retry}"
                )
                self._emit(RetryEvent(
                    type="attempt:fail",
                    attempt=attempt,
                    data={"error": detail, "will_retry": will_retry},
                ))
                if not will_retry:
                    self._emit(RetryEvent(type="retry:abort", attempt=attempt, data={"error": detail}))
                    return Failed(kind=ErrorKind.TRANSPORT_ERROR, detail=detail, attempts=attempt)
                await self._backoff(attempt)
                continue

            body = response.text
            if body.strip():
                self._mask(body)

            status = response.status_code
            logger.info(f"Response status: {status}")
            if self._debug:
                logger.debug(f"TokenExchangeClient.exchange: Response body: {body}")

            if is_success_status(status):
                self._emit(RetryEvent(
                    type="attempt:success",
                    attempt=attempt,
                    data={"status": status, "duration_seconds": time.monotonic() - start_time},
                ))
                return self._parse_success(body, attempt)

            will_retry = is_retryable_status(status) and has_attempts_left(attempt, self._config)
            self._emit(RetryEvent(
                type="attempt:fail",
                attempt=attempt,
                data={"status": status, "will_retry": will_retry},
            ))

            if not will_retry:
                if is_client_error_status(status):
                    logger.debug(
                        f"TokenExchangeClient.exchange: Client error {status}, not retrying"
                    )
                else:
                    self._emit(RetryEvent(type="retry:abort", attempt=attempt, data={"status": status}))
                message = extract_error_message(body, status, response.reason_phrase)
                logger.warning(
                    f"TokenExchangeClient.exchange: Giving up after attempt "
                    f"{attempt}/{self._config.max_attempts} with status {status}"
                )
                return Failed(
                    kind=ErrorKind.HTTP_ERROR,
                    detail=message,
                    status_code=status,
                    attempts=attempt,
                )

            logger.warning(
                f"TokenExchangeClient.exchange: Attempt {attempt}/{self._config.max_attempts} "
                f"failed with status {status}, retrying"
            )
            await self._backoff(attempt)

    async def _backoff(self, attempt: int) -> None:
        delay = calculate_backoff_delay(attempt, self._config)
        self._emit(RetryEvent(type="retry:wait", attempt=attempt, data={"delay_seconds": delay}))
        logger.info(f"Retrying token exchange in {delay:g}s")
        await self._sleep(delay)

    def _parse_success(self, body: str, attempt: int) -> ExchangeOutcome:
        token = parse_token_body(body)
        if not token:
            logger.error("TokenExchangeClient.exchange: No token found in 2xx response body")
            return Failed(kind=ErrorKind.PROTOCOL_ERROR, detail="no token found", attempts=attempt)

        self._mask(token)
        logger.debug(
            f"TokenExchangeClient.exchange: Token received after {attempt} attempt(s) "
            f"(length={len(token)}, masked={mask_sensitive(token)})"
        )
        return Token(value=token, attempts=attempt)
