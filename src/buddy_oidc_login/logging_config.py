"""
Logging setup for buddy_oidc_login.

The debug flag comes from the resolved inputs and is passed in explicitly;
nothing here keeps global debug state.
"""
import logging
import sys
from typing import Optional, TextIO


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


def mask_sensitive(value: Optional[str], visible_chars: int = 4) -> str:
    """Mask sensitive values for safe logging."""
    if value is None:
        return "<None>"
    if not isinstance(value, str):
        return "<invalid-type>"
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def configure_logging(debug: bool = False, stream: Optional[TextIO] = None) -> None:
    """
    Configure root logging for a CLI run.

    Args:
        debug: Log at DEBUG level when True, INFO otherwise
        stream: Output stream (default: stderr)
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=stream or sys.stderr,
        force=True,
    )
    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)
