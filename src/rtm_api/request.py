"""Request construction and signing."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlencode

from rtm_api.config import RtmConfig
from rtm_api.exceptions import ConfigurationError
from rtm_api.params import ParameterSet
from rtm_api.signing import SIGNATURE_KEY, sign

logger = logging.getLogger(__name__)

METHOD_KEY = "method"
API_KEY_KEY = "api_key"
AUTH_TOKEN_KEY = "auth_token"
FORMAT_KEY = "format"

RESERVED_KEYS = frozenset({METHOD_KEY, API_KEY_KEY, AUTH_TOKEN_KEY, FORMAT_KEY, SIGNATURE_KEY})


class RequestKind(str, Enum):
    """Capability of a request: which credentials it carries."""

    PLAIN = "plain"  # api key only
    SIGNED = "signed"  # api key + signature
    AUTHENTICATED = "authenticated"  # api key + token + signature

    @property
    def is_signed(self) -> bool:
        return self is not RequestKind.PLAIN


@dataclass(frozen=True)
class Request:
    """A request ready for transport.

    ``params`` holds the pairs in the order they are sent, with the
    signature last when the request is signed.
    """

    endpoint: str
    method: str
    kind: RequestKind
    params: tuple[tuple[str, str], ...]
    http_method: str = "GET"

    def as_dict(self) -> dict[str, str]:
        return dict(self.params)

    @property
    def signature(self) -> str | None:
        return self.as_dict().get(SIGNATURE_KEY)

    @property
    def url(self) -> str:
        """Full URL with query string, as a GET request would use it."""
        return f"{self.endpoint}?{urlencode(self.params)}"


def build_request(
    kind: RequestKind,
    method: str,
    config: RtmConfig,
    params: ParameterSet | Mapping[str, str] | None = None,
    http_method: str = "GET",
) -> Request:
    """Build a request for an RTM method.

    Args:
        kind: Which credentials the request carries.
        method: RTM method name (e.g., "rtm.tasks.getList").
        config: Client configuration with api key, secret and token.
        params: Caller parameters. Never modified.
        http_method: "GET" or "POST".

    Returns:
        An immutable Request.

    Raises:
        ConfigurationError: If a caller parameter uses a reserved name, the
            token is missing for an authenticated request, or the shared
            secret is missing for a signed one.
    """
    caller = params if isinstance(params, ParameterSet) else ParameterSet(params)

    collisions = sorted(name for name in caller if name in RESERVED_KEYS)
    if collisions:
        raise ConfigurationError(f"Reserved parameter names cannot be set by callers: {collisions}")

    merged = caller.copy()
    merged.put(METHOD_KEY, method)
    merged.put(API_KEY_KEY, config.api_key)
    merged.put(FORMAT_KEY, config.response_format)

    if kind is RequestKind.AUTHENTICATED:
        if not config.token:
            raise ConfigurationError(f"{method} requires an auth token")
        merged.put(AUTH_TOKEN_KEY, config.token)

    pairs = merged.to_ordered_pairs()
    if kind.is_signed:
        if not config.shared_secret:
            raise ConfigurationError(f"{method} requires a shared secret to be signed")
        pairs.append((SIGNATURE_KEY, sign(merged, config.shared_secret)))

    logger.debug(f"Built {kind.value} request for {method}")
    return Request(
        endpoint=config.rest_url,
        method=method,
        kind=kind,
        params=tuple(pairs),
        http_method=http_method.upper(),
    )


def build_auth_url(config: RtmConfig, perms: str, frob: str | None = None) -> str:
    """Build the signed URL a user visits to authorize the application.

    Args:
        config: Client configuration.
        perms: Permission level ("read", "write" or "delete").
        frob: Frob to bind the authorization to (desktop flow).

    Returns:
        Authorization URL.
    """
    if not config.shared_secret:
        raise ConfigurationError("A shared secret is required to build the authorization URL")

    params = ParameterSet({API_KEY_KEY: config.api_key, "perms": perms})
    if frob:
        params.put("frob", frob)

    pairs = params.to_ordered_pairs()
    pairs.append((SIGNATURE_KEY, sign(params, config.shared_secret)))
    return f"{config.auth_url}?{urlencode(pairs)}"
