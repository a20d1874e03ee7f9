"""
Read raw AuthInput values from the host environment.

A GitHub Actions runner exposes each `with:` value of a step as an
INPUT_<NAME> environment variable. Empty values count as not set.
"""
import logging
import os
from typing import Mapping, Optional

from pydantic import SecretStr

from .types import AuthInput

logger = logging.getLogger(__name__)


INPUT_NAMES = ("api_key", "provider_id", "audience", "api_url", "region", "debug")


def input_env_name(name: str) -> str:
    """Return the environment variable holding an action input."""
    return f"INPUT_{name.replace(' ', '_').upper()}"


def get_input(name: str, environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """
    Get a single input value.

    Args:
        name: Input name as declared by the action (e.g. 'provider_id')
        environ: Environment mapping (default: os.environ)

    Returns:
        Trimmed value, or None if unset or blank
    """
    env = os.environ if environ is None else environ
    value = env.get(input_env_name(name), "").strip()
    return value or None


def parse_debug(value: Optional[str]) -> bool:
    """Return True only for a case-insensitive 'true'."""
    return value is not None and value.strip().lower() == "true"


def debug_enabled(
    environ: Optional[Mapping[str, str]] = None,
    override: Optional[str] = None,
) -> bool:
    """
    Return True if debug output is requested.

    Args:
        environ: Environment mapping (default: os.environ)
        override: Debug value that takes precedence over INPUT_DEBUG
    """
    env = os.environ if environ is None else environ
    value = override if override is not None else get_input("debug", env)
    return parse_debug(value) or env.get("RUNNER_DEBUG") == "1"


def read_auth_input(
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Optional[str]]] = None,
) -> AuthInput:
    """
    Build AuthInput from the environment.

    Args:
        environ: Environment mapping (default: os.environ)
        overrides: Values that take precedence over the environment,
                   e.g. CLI flags. None entries are ignored.

    Returns:
        Raw, unvalidated AuthInput
    """
    env = os.environ if environ is None else environ
    values = {name: get_input(name, env) for name in INPUT_NAMES}

    for name, value in (overrides or {}).items():
        if name not in INPUT_NAMES:
            raise KeyError(f"Unknown input: {name}")
        if value is not None:
            values[name] = value.strip() or None

    debug = parse_debug(values.pop("debug")) or env.get("RUNNER_DEBUG") == "1"
    api_key = values.pop("api_key")

    provided = sorted(name for name, value in values.items() if value is not None)
    logger.debug(
        f"read_auth_input: Inputs provided={provided}, has_api_key={api_key is not None}, "
        f"debug={debug}"
    )

    return AuthInput(
        api_key=SecretStr(api_key) if api_key is not None else None,
        debug=debug,
        **values,
    )
