"""Remember The Milk API exceptions.

Three disjoint kinds of failure:

- RtmServerError: the server understood the request and said no.
- RtmApiError: the wire contract was broken (or the library was misused).
- TransportError: the server could not be reached in time.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ServerFailure:
    """Failure payload of a ``stat="fail"`` response."""

    code: int
    message: str


class RtmError(Exception):
    """Base exception for Remember The Milk client errors."""


class RtmServerError(RtmError):
    """Raised when the server answers with ``stat="fail"``."""

    def __init__(self, failure: ServerFailure):
        self.failure = failure
        self.code = failure.code
        self.message = failure.message
        super().__init__(f"RTM error {failure.code}: {failure.message}")


class RtmApiError(RtmError):
    """Raised when a response breaks the API contract."""


class ConfigurationError(RtmApiError):
    """Raised when a request cannot be built from the given configuration."""


class AuthFlowStateError(ConfigurationError):
    """Raised when an authentication step is called out of order."""

    def __init__(self, message: str, state: str):
        self.state = state
        super().__init__(f"{message} (state: {state})")


class TransportError(RtmError):
    """Raised when the HTTP call fails or times out."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
