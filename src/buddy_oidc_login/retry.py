"""
Retry policy for the token exchange.

Plain exponential backoff without jitter.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Literal


@dataclass(frozen=True)
class RetryConfig:
    """Retry configuration"""

    max_attempts: int = 3
    """Maximum number of attempts, including the first one. Default: 3"""

    base_delay_seconds: float = 1.0
    """Delay after the first failed attempt (seconds). Default: 1.0"""

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay_seconds < 0:
            raise ValueError(f"base_delay_seconds must be >= 0, got {self.base_delay_seconds}")


DEFAULT_RETRY_CONFIG = RetryConfig()


EventType = Literal[
    "attempt:start",
    "attempt:success",
    "attempt:fail",
    "retry:wait",
    "retry:abort",
]


@dataclass
class RetryEvent:
    """Event emitted by the exchange retry loop"""

    type: EventType
    """Event type"""

    attempt: int
    """Current attempt number (1-indexed)"""

    data: Dict[str, Any] = field(default_factory=dict)
    """Event-specific data"""


RetryEventListener = Callable[[RetryEvent], None]


def calculate_backoff_delay(attempt: int, config: RetryConfig = DEFAULT_RETRY_CONFIG) -> float:
    """
    Delay to wait after a failed attempt.

    delay = base * 2^(attempt - 1), so 1s after attempt 1 and 2s after attempt 2
    with the default config.

    Args:
        attempt: The attempt that just failed (1-indexed)
        config: Retry configuration

    Returns:
        Delay in seconds
    """
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")
    return config.base_delay_seconds * (2 ** (attempt - 1))


def is_success_status(status: int) -> bool:
    """2xx responses end the loop successfully."""
    return 200 <= status <= 299


def is_client_error_status(status: int) -> bool:
    """4xx responses are terminal and never retried."""
    return 400 <= status <= 499


def is_retryable_status(status: int) -> bool:
    """5xx responses are retried while attempts remain."""
    return 500 <= status <= 599


def has_attempts_left(attempt: int, config: RetryConfig = DEFAULT_RETRY_CONFIG) -> bool:
    """True if another attempt may follow the given one."""
    return attempt < config.max_attempts


async def async_sleep(seconds: float) -> None:
    """
    Sleep for a specified duration (async).

    Args:
        seconds: Duration in seconds
    """
    await asyncio.sleep(seconds)
