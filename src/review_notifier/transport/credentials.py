from __future__ import annotations

import logging
import shlex
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from review_notifier.config import ConfigError

logger = logging.getLogger(__name__)


class TokenError(ConfigError):
    """Raised when the Play Developer API credential is unavailable."""


class TokenProvider(ABC):
    @abstractmethod
    def get_token(self) -> str:
        """Return the current API access token."""


class FileTokenProvider(TokenProvider):
    """Reads a token provisioned by an external refresh process.

    Relative paths are resolved against the working directory at read time,
    since the refresh script writes next to wherever the process runs.
    """

    def __init__(self, path: str = "api.token") -> None:
        self.path = path

    def get_token(self) -> str:
        token_path = Path(self.path).expanduser()
        if not token_path.is_absolute():
            token_path = Path.cwd() / token_path

        try:
            token = token_path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise TokenError(f"cannot read API token from {token_path}: {exc}") from exc

        if not token:
            raise TokenError(f"API token file {token_path} is empty")
        return token


def refresh_token(command: str, timeout_seconds: int = 120) -> bool:
    """Run the external token refresh command; return whether it succeeded."""
    try:
        completed = subprocess.run(
            shlex.split(command),
            capture_output=True,
            text=True,
            timeout=timeout_seconds,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired, ValueError) as exc:
        logger.error("token refresh command %r could not run: %s", command, exc)
        return False

    if completed.stdout.strip():
        logger.info("token refresh output: %s", completed.stdout.strip())
    if completed.returncode != 0:
        logger.error(
            "token refresh command exited with %d: %s",
            completed.returncode,
            completed.stderr.strip(),
        )
        return False
    return True
