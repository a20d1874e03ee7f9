"""
Output boundary for GitHub Actions.

Writes workflow commands (::add-mask::, ::error::, ::debug::) to stdout and
exports values through the GITHUB_ENV / GITHUB_OUTPUT files. Secrets must
go through add_mask before they are written anywhere else.
"""
import logging
import os
import sys
import uuid
from typing import MutableMapping, Optional, TextIO

logger = logging.getLogger(__name__)


TOKEN_ENV_NAME = "BUDDY_TOKEN"
ENDPOINT_ENV_NAME = "BUDDY_API_ENDPOINT"
TOKEN_OUTPUT_NAME = "token"
ENDPOINT_OUTPUT_NAME = "api_url"


def escape_data(value: str) -> str:
    """Escape a workflow command message."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(value: str) -> str:
    """Escape a workflow command property value."""
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


def format_command(command: str, message: str, **properties: str) -> str:
    """Format a '::command key=value::message' line."""
    props = ",".join(f"{key}={escape_property(val)}" for key, val in properties.items())
    head = f"{command} {props}" if props else command
    return f"::{head}::{escape_data(message)}"


def prepare_key_value_message(key: str, value: str) -> str:
    """
    Build a GITHUB_ENV / GITHUB_OUTPUT entry using the heredoc form.

    Raises:
        ValueError: If key or value contains the generated delimiter
    """
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    if delimiter in key:
        raise ValueError(f"Unexpected input: name should not contain the delimiter \"{delimiter}\"")
    if delimiter in value:
        raise ValueError(f"Unexpected input: value should not contain the delimiter \"{delimiter}\"")
    return f"{key}<<{delimiter}\n{value}\n{delimiter}\n"


class ActionsOutput:
    """
    GitHub Actions output sink.

    Example:
        output = ActionsOutput()
        output.add_mask(token)
        output.export_variable("BUDDY_TOKEN", token)
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        environ: Optional[MutableMapping[str, str]] = None,
    ) -> None:
        """
        Args:
            stream: Where workflow commands go (default: sys.stdout)
            environ: Environment used for file command paths and for
                     exported variables (default: os.environ)
        """
        self._stream = stream
        self._environ = os.environ if environ is None else environ
        self._masked: set[str] = set()

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    @property
    def masked_values(self) -> frozenset[str]:
        """Values registered through add_mask."""
        return frozenset(self._masked)

    def issue(self, command: str, message: str = "", **properties: str) -> None:
        self.stream.write(format_command(command, message, **properties) + "\n")
        self.stream.flush()

    def add_mask(self, value: str) -> None:
        """
        Register a secret so the runner redacts it from logs.

        Multi-line values are masked line by line since the runner matches
        single lines.
        """
        for line in value.splitlines() or [value]:
            line = line.strip()
            if not line or line in self._masked:
                continue
            self._masked.add(line)
            self.issue("add-mask", line)

    def debug(self, message: str) -> None:
        self.issue("debug", message)

    def error(self, message: str) -> None:
        self.issue("error", message)

    def set_failed(self, message: str) -> None:
        """Report a fatal error; the caller sets the non-zero exit code."""
        self.error(message)

    def _write_file_command(self, env_name: str, key: str, value: str) -> bool:
        path = self._environ.get(env_name)
        if not path:
            return False
        with open(path, "a", encoding="utf-8") as handle:
            handle.write(prepare_key_value_message(key, value))
        logger.debug(f"ActionsOutput._write_file_command: Wrote '{key}' to {env_name}")
        return True

    def export_variable(self, name: str, value: str) -> None:
        """Export an environment variable for this and later steps."""
        self._environ[name] = value
        if not self._write_file_command("GITHUB_ENV", name, value):
            self.issue("set-env", value, name=name)

    def set_output(self, name: str, value: str) -> None:
        """Set a step output."""
        if not self._write_file_command("GITHUB_OUTPUT", name, value):
            self.stream.write("\n")
            self.issue("set-output", value, name=name)

    def export_login(self, token: str, endpoint: str) -> None:
        """Export the final token and endpoint; the token is masked first."""
        self.add_mask(token)
        self.export_variable(TOKEN_ENV_NAME, token)
        self.export_variable(ENDPOINT_ENV_NAME, endpoint)
        self.set_output(TOKEN_OUTPUT_NAME, token)
        self.set_output(ENDPOINT_OUTPUT_NAME, endpoint)
        logger.info(f"Exported {TOKEN_ENV_NAME} and {ENDPOINT_ENV_NAME}")
