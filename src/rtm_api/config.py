"""Client configuration.

Credentials are read from the environment, with an optional .env file at the
repository root:
    RTM_API_KEY          - API key of the application
    RTM_SHARED_SECRET    - Shared secret of the application
    RTM_AUTH_TOKEN       - Token obtained through the authentication flow
    RTM_RESPONSE_FORMAT  - "json" (default) or "rest" for XML responses

This module auto-loads the .env file on import. Variables already present in
the environment take precedence.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from rtm_api.exceptions import ConfigurationError

# __file__ is src/rtm_api/config.py, so 3 levels up
REPO_ROOT = Path(__file__).parent.parent.parent
ENV_FILE = REPO_ROOT / ".env"

REST_URL = "https://api.rememberthemilk.com/services/rest/"
AUTH_URL = "https://www.rememberthemilk.com/services/auth/"

ENV_API_KEY = "RTM_API_KEY"
ENV_SHARED_SECRET = "RTM_SHARED_SECRET"
ENV_AUTH_TOKEN = "RTM_AUTH_TOKEN"
ENV_RESPONSE_FORMAT = "RTM_RESPONSE_FORMAT"

# Values of the "format" parameter
RESPONSE_FORMATS = ("json", "rest")
DEFAULT_RESPONSE_FORMAT = "json"
DEFAULT_TIMEOUT = 30.0


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _load_env_file(env_path: Path) -> dict[str, str]:
    """Copy ``KEY=value`` lines of a .env file into ``os.environ``.

    Blank lines, comments and lines without ``=`` are skipped. Variables
    already set in the environment are left alone.

    Returns:
        The variables that were set.
    """
    if not env_path.is_file():
        return {}

    loaded = {}
    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip()
        if not key or key in os.environ:
            continue
        os.environ[key] = loaded[key] = _unquote(value.strip())

    return loaded


@dataclass(frozen=True)
class RtmConfig:
    """Immutable client configuration shared by every request of a client.

    Attributes:
        api_key: API key of the application.
        shared_secret: Shared secret used to sign requests.
        token: Auth token of the user, required by authenticated methods.
        response_format: "json" or "rest" (XML).
        rest_url: REST endpoint.
        auth_url: Browser authorization endpoint.
        timeout: HTTP timeout in seconds.
    """

    api_key: str
    shared_secret: str | None = None
    token: str | None = None
    response_format: str = DEFAULT_RESPONSE_FORMAT
    rest_url: str = REST_URL
    auth_url: str = AUTH_URL
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ConfigurationError(
                "RTM api_key is required. "
                f"Set {ENV_API_KEY} env var or pass api_key parameter."
            )
        if self.response_format not in RESPONSE_FORMATS:
            raise ConfigurationError(
                f"Unknown response format: {self.response_format}. "
                f"Use one of: {list(RESPONSE_FORMATS)}"
            )

    @classmethod
    def from_env(
        cls,
        api_key: str | None = None,
        shared_secret: str | None = None,
        token: str | None = None,
        response_format: str | None = None,
        **kwargs,
    ) -> RtmConfig:
        """Build a configuration, filling missing values from the environment."""
        return cls(
            api_key=api_key or os.environ.get(ENV_API_KEY, ""),
            shared_secret=shared_secret or os.environ.get(ENV_SHARED_SECRET),
            token=token or os.environ.get(ENV_AUTH_TOKEN),
            response_format=response_format
            or os.environ.get(ENV_RESPONSE_FORMAT, DEFAULT_RESPONSE_FORMAT),
            **kwargs,
        )

    def with_token(self, token: str | None) -> RtmConfig:
        """Return a copy bound to another token."""
        return replace(self, token=token)


def get_credential_status() -> dict:
    """Report which RTM credentials the environment provides.

    Values are never included, only whether each one is set. A client can
    sign requests once ``can_sign`` is True and call user methods once
    ``can_authenticate`` is True as well.
    """
    api_key = bool(os.environ.get(ENV_API_KEY))
    shared_secret = bool(os.environ.get(ENV_SHARED_SECRET))
    auth_token = bool(os.environ.get(ENV_AUTH_TOKEN))
    return {
        "env_file": ENV_FILE.is_file(),
        "api_key": api_key,
        "shared_secret": shared_secret,
        "auth_token": auth_token,
        "can_sign": api_key and shared_secret,
        "can_authenticate": api_key and shared_secret and auth_token,
        "response_format": os.environ.get(ENV_RESPONSE_FORMAT, DEFAULT_RESPONSE_FORMAT),
    }


# Auto-load .env from repo root on import
_loaded = _load_env_file(ENV_FILE)
