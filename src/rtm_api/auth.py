"""Three-legged authentication: frob -> user authorization -> token.

Example:
    >>> flow = AuthFlow(RtmConfig.from_env())
    >>> flow.request_frob()
    >>> url = flow.authorization_url(Permission.DELETE)
    >>> print(f"Visit: {url}")
    >>> input("Press Enter once the application is authorized")
    >>> token = flow.exchange_token()

The browser visit is the caller's job. If the user has not authorized the
frob yet, ``exchange_token`` raises the server error and may be called again.
"""

from __future__ import annotations

import logging
from enum import Enum

from rtm_api import methods
from rtm_api.config import RtmConfig
from rtm_api.exceptions import AuthFlowStateError, TransportError
from rtm_api.models import Permission, Token
from rtm_api.request import RequestKind, build_auth_url, build_request
from rtm_api.response import RtmResponse, decode
from rtm_api.transport import Transport

logger = logging.getLogger(__name__)


class AuthState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FROB_ISSUED = "frob_issued"
    AUTHORIZED = "authorized"  # URL handed out, user action pending
    TOKEN_OBTAINED = "token_obtained"


class AuthFlow:
    """State machine producing a Token from an API key and shared secret.

    A failed step leaves the flow in the last state it reached, so the
    caller can retry that step. A transport failure while requesting a
    frob resets the flow.
    """

    def __init__(self, config: RtmConfig, transport: Transport | None = None):
        """Initialize the flow.

        Args:
            config: Configuration with api key and shared secret. Any token
                it carries is ignored.
            transport: Transport to use. Created from config if None.
        """
        self.config = config.with_token(None)
        self._owns_transport = transport is None
        self._transport = transport or Transport(timeout=config.timeout)
        self.state = AuthState.UNAUTHENTICATED
        self.frob: str | None = None
        self.token: Token | None = None

    def _call(self, method: str, params: dict[str, str] | None = None) -> RtmResponse:
        request = build_request(RequestKind.SIGNED, method, self.config, params)
        return decode(self._transport.send(request))

    def _transition(self, state: AuthState) -> None:
        logger.info(f"Auth flow: {self.state.value} -> {state.value}")
        self.state = state

    def request_frob(self) -> str:
        """Ask the server for a new frob.

        Returns:
            The frob.

        Raises:
            AuthFlowStateError: If a token was already obtained.
            RtmServerError: If the server refuses.
            TransportError: If the server cannot be reached.
        """
        if self.state is AuthState.TOKEN_OBTAINED:
            raise AuthFlowStateError("Token already obtained", self.state.value)

        try:
            frob = self._call(methods.AUTH_GET_FROB).get_frob()
        except TransportError:
            self.frob = None
            if self.state is not AuthState.UNAUTHENTICATED:
                self._transition(AuthState.UNAUTHENTICATED)
            raise

        self.frob = frob
        self._transition(AuthState.FROB_ISSUED)
        return frob

    def authorization_url(self, perms: Permission | str = Permission.DELETE) -> str:
        """Build the URL the user must visit to authorize the frob.

        Args:
            perms: Permission level to request.

        Returns:
            Signed authorization URL.

        Raises:
            AuthFlowStateError: If no frob has been issued.
        """
        if self.state not in (AuthState.FROB_ISSUED, AuthState.AUTHORIZED) or not self.frob:
            raise AuthFlowStateError("Request a frob first", self.state.value)

        url = build_auth_url(self.config, Permission(perms).value, self.frob)
        if self.state is AuthState.FROB_ISSUED:
            self._transition(AuthState.AUTHORIZED)
        return url

    def exchange_token(self) -> Token:
        """Exchange the authorized frob for a token.

        Returns:
            The Token.

        Raises:
            AuthFlowStateError: If no frob has been issued (no network call
                is made) or a token was already obtained.
            RtmServerError: If the frob is invalid, expired or not yet
                authorized. The state is unchanged.
            TransportError: If the server cannot be reached.
        """
        if self.state not in (AuthState.FROB_ISSUED, AuthState.AUTHORIZED) or not self.frob:
            raise AuthFlowStateError(
                "Cannot exchange a token before a frob is issued", self.state.value
            )

        token = self._call(methods.AUTH_GET_TOKEN, {"frob": self.frob}).get_token()

        self.token = token
        self.frob = None
        self._transition(AuthState.TOKEN_OBTAINED)
        return token

    def check_token(self, token: Token | str) -> Token:
        """Ask the server whether ``token`` is still valid.

        Returns:
            The token details reported by the server.

        Raises:
            RtmServerError: Code 98 if the token is invalid.
        """
        config = self.config.with_token(str(token))
        request = build_request(RequestKind.AUTHENTICATED, methods.AUTH_CHECK_TOKEN, config)
        return decode(self._transport.send(request)).get_token()

    def close(self):
        """Close the transport if this flow created it."""
        if self._owns_transport:
            self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
