"""
Command line entry point.

Exit code 0 on success, 1 on any LoginError. The error message is reported
through the output boundary as a ::error:: command.
"""
import argparse
import asyncio
import logging
from typing import Optional, Sequence

from dotenv import load_dotenv

from . import __version__
from .actions import ActionsOutput
from .errors import LoginError
from .inputs import debug_enabled, read_auth_input
from .login import run
from .logging_config import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buddy-oidc-login",
        description=(
            "Exchange the GitHub Actions OIDC token for a Buddy API token. "
            "Flags override the matching INPUT_* environment variables."
        ),
    )
    parser.add_argument("--api-key", help="Static Buddy API token (skips the exchange)")
    parser.add_argument("--provider-id", help="Buddy OIDC provider ID")
    parser.add_argument("--audience", help="Audience for the GitHub ID token")
    parser.add_argument("--api-url", help="Explicit HTTPS API base URL")
    parser.add_argument("--region", help="Buddy region (EU or US)")
    parser.add_argument(
        "--debug",
        action="store_const",
        const="true",
        default=None,
        help="Enable debug logging",
    )
    parser.add_argument("--env-file", help="Load environment variables from a dotenv file first")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[Sequence[str]] = None, output: Optional[ActionsOutput] = None) -> int:
    """
    Run a login and return the process exit code.

    Args:
        argv: Command line arguments (default: sys.argv[1:])
        output: Output boundary (default: stdout / os.environ)
    """
    args = build_parser().parse_args(argv)

    loaded = load_dotenv(args.env_file, override=False) if args.env_file else None
    configure_logging(debug_enabled(override=args.debug))
    if args.env_file and not loaded:
        logger.warning(f"main: No variables loaded from env file '{args.env_file}'")

    output = output or ActionsOutput()
    raw = read_auth_input(
        overrides={
            "api_key": args.api_key,
            "provider_id": args.provider_id,
            "audience": args.audience,
            "api_url": args.api_url,
            "region": args.region,
            "debug": args.debug,
        }
    )

    try:
        asyncio.run(run(raw, output=output))
    except LoginError as error:
        logger.debug(f"main: Login failed with {type(error).__name__}")
        output.set_failed(str(error))
        return 1

    return 0
