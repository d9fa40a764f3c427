"""Shared fixtures."""

import httpx
import pytest

from rtm_api import RtmConfig

FAIL_98 = (
    b'<?xml version="1.0" encoding="UTF-8"?>'
    b'<rsp stat="fail"><err code="98" msg="Login failed / Invalid auth token"/></rsp>'
)


@pytest.fixture
def config():
    """Configuration with api key, secret and token."""
    return RtmConfig(api_key="K", shared_secret="S", token="T")


class Recorder:
    """httpx.MockTransport handler replaying canned bodies and recording requests."""

    def __init__(self, *bodies: bytes | str, status_code: int = 200):
        self.bodies = list(bodies)
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = self.bodies.pop(0) if len(self.bodies) > 1 else self.bodies[0]
        if isinstance(body, str):
            body = body.encode("utf-8")
        return httpx.Response(self.status_code, content=body)

    @property
    def params(self) -> dict[str, str]:
        """Query parameters of the last request."""
        return dict(self.requests[-1].url.params)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)
