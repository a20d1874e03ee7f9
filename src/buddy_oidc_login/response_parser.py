"""
Response body parsing for the token exchange endpoint.

The Buddy API has returned the issued token in several shapes over time:
a bare UUID, JSON under varying field names, and other plain text. All of
them are accepted without version negotiation.
"""
import json
import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)


UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)

# Checked in priority order
TOKEN_FIELDS = ("token", "access_token", "buddy_token")


def extract_token_field(data: Any) -> Optional[str]:
    """
    Return the first non-empty string among TOKEN_FIELDS, or None.

    A whitespace-only value still counts as found; the final login check
    rejects it.
    """
    if not isinstance(data, dict):
        logger.debug(
            f"extract_token_field: JSON body is {type(data).__name__}, not an object"
        )
        return None

    for name in TOKEN_FIELDS:
        value = data.get(name)
        if isinstance(value, str) and value:
            logger.debug(f"extract_token_field: Found token in field '{name}'")
            return value
        if value is not None:
            logger.debug(
                f"extract_token_field: Field '{name}' present but not a non-empty string"
            )

    logger.debug(f"extract_token_field: No token field in keys {sorted(data.keys())}")
    return None


def parse_token_body(body: str) -> Optional[str]:
    """
    Extract the access token from a 2xx response body.

    Order:
    1. Trimmed body is a UUID -> the body is the token
    2. Body is JSON -> first non-empty string among token/access_token/buddy_token
    3. Body is neither but non-empty -> the trimmed body is the token

    Args:
        body: Raw response text

    Returns:
        Token string, or None if the body holds no token
    """
    trimmed = body.strip()
    if not trimmed:
        return None

    if UUID_PATTERN.fullmatch(trimmed):
        logger.debug("parse_token_body: Body is a plain UUID token")
        return trimmed

    try:
        data = json.loads(trimmed)
    except ValueError:
        logger.debug("parse_token_body: Body is not JSON, using plain text as token")
        return trimmed

    return extract_token_field(data)


def generic_error_message(status_code: int, reason_phrase: str = "") -> str:
    """Message used when the error body carries nothing readable."""
    reason = f" {reason_phrase}" if reason_phrase else ""
    return f"Request failed with status code {status_code}{reason}"


def extract_error_message(body: str, status_code: int, reason_phrase: str = "") -> str:
    """
    Extract a human-readable message from a non-2xx response body.

    Looks at errors[0].message, then a top-level message. Never raises:
    unparsable or unexpected bodies fall back to a generic message.

    Args:
        body: Raw response text
        status_code: HTTP status code
        reason_phrase: HTTP reason phrase

    Returns:
        Error message
    """
    try:
        data = json.loads(body)
    except ValueError:
        logger.debug(f"extract_error_message: Error body for status {status_code} is not JSON")
        return generic_error_message(status_code, reason_phrase)

    if isinstance(data, dict):
        errors = data.get("errors")
        if isinstance(errors, list) and errors:
            first = errors[0]
            if isinstance(first, dict):
                message = first.get("message")
                if isinstance(message, str) and message.strip():
                    return message.strip()

        message = data.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()

    logger.debug(f"extract_error_message: No message found in error body for status {status_code}")
    return generic_error_message(status_code, reason_phrase)
