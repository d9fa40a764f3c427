"""Request signing for the Remember The Milk API."""

from __future__ import annotations

import hashlib

from rtm_api.exceptions import ConfigurationError
from rtm_api.params import ParameterSet

SIGNATURE_KEY = "api_sig"


def sign(params: ParameterSet, shared_secret: str) -> str:
    """Compute the request signature.

    The signed material is the shared secret followed by every name and
    value, sorted by name, with no separators. The signature is the MD5
    digest of its UTF-8 encoding as 32 lowercase hex digits.

    Args:
        params: Parameters to sign. ``api_sig`` is never part of the input.
        shared_secret: The application's shared secret.

    Returns:
        Lowercase hexadecimal signature.

    Raises:
        ConfigurationError: If the shared secret is empty.
    """
    if not shared_secret:
        raise ConfigurationError("A shared secret is required to sign requests")

    parts = [shared_secret]
    for name, value in params.to_ordered_pairs():
        if name == SIGNATURE_KEY:
            continue
        parts.append(name)
        parts.append(value)

    return hashlib.md5("".join(parts).encode("utf-8")).hexdigest()
