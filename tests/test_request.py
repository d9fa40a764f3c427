"""Tests for request building."""

from urllib.parse import parse_qsl, urlsplit

import pytest

from rtm_api import (
    ConfigurationError,
    ParameterSet,
    RequestKind,
    RtmConfig,
    build_auth_url,
    build_request,
    sign,
)
from rtm_api.config import REST_URL


class TestBuildRequest:
    """Test build_request for each request kind."""

    def test_plain_request_is_unsigned(self, config):
        """Should inject method, api_key and format but no signature."""
        request = build_request(RequestKind.PLAIN, "rtm.test.echo", config, {"foo": "bar"})
        params = request.as_dict()
        assert params == {
            "api_key": "K",
            "foo": "bar",
            "format": "json",
            "method": "rtm.test.echo",
        }
        assert request.signature is None
        assert request.endpoint == REST_URL
        assert request.http_method == "GET"

    def test_signed_request_has_no_token(self, config):
        """Should sign without adding the auth token."""
        request = build_request(RequestKind.SIGNED, "rtm.time.convert", config, {"to_timezone": "UTC"})
        params = request.as_dict()
        assert "auth_token" not in params
        assert request.signature is not None

    def test_authenticated_request_has_token(self, config):
        """Should add the auth token and sign it."""
        request = build_request(RequestKind.AUTHENTICATED, "rtm.tasks.getList", config)
        assert request.as_dict()["auth_token"] == "T"

    def test_signature_is_last(self, config):
        """Should append api_sig after every other parameter."""
        request = build_request(RequestKind.AUTHENTICATED, "rtm.tasks.getList", config, {"zzz": "1"})
        assert request.params[-1][0] == "api_sig"

    def test_signature_covers_all_other_parameters(self, config):
        """Should sign exactly the parameters that are sent."""
        request = build_request(
            RequestKind.AUTHENTICATED, "rtm.tasks.getList", config, {"filter": "status:incomplete"}
        )
        params = request.as_dict()
        signature = params.pop("api_sig")
        assert signature == sign(ParameterSet(params), "S")

    def test_missing_token(self):
        """Should refuse an authenticated request without a token."""
        config = RtmConfig(api_key="K", shared_secret="S")
        with pytest.raises(ConfigurationError, match="requires an auth token"):
            build_request(RequestKind.AUTHENTICATED, "rtm.tasks.getList", config)

    def test_missing_secret(self):
        """Should refuse a signed request without a shared secret."""
        config = RtmConfig(api_key="K")
        with pytest.raises(ConfigurationError, match="shared secret"):
            build_request(RequestKind.SIGNED, "rtm.auth.getFrob", config)

    def test_plain_request_needs_no_secret(self):
        """Should build plain requests with only an api key."""
        request = build_request(RequestKind.PLAIN, "rtm.test.echo", RtmConfig(api_key="K"))
        assert request.as_dict()["api_key"] == "K"

    @pytest.mark.parametrize("reserved", ["method", "api_key", "auth_token", "api_sig", "format"])
    def test_reserved_names_rejected(self, config, reserved):
        """Should refuse caller parameters that collide with injected names."""
        with pytest.raises(ConfigurationError, match="Reserved"):
            build_request(RequestKind.AUTHENTICATED, "rtm.tasks.getList", config, {reserved: "x"})

    def test_caller_params_not_mutated(self, config):
        """Should leave the caller's ParameterSet untouched."""
        params = ParameterSet({"list_id": "1"})
        build_request(RequestKind.AUTHENTICATED, "rtm.tasks.getList", config, params)
        assert params.to_ordered_pairs() == [("list_id", "1")]

    def test_request_is_immutable(self, config):
        """Should not allow fields to be reassigned."""
        request = build_request(RequestKind.PLAIN, "rtm.test.echo", config)
        with pytest.raises(AttributeError):
            request.method = "rtm.test.login"

    def test_xml_format(self):
        """Should send the configured response format."""
        config = RtmConfig(api_key="K", shared_secret="S", response_format="rest")
        request = build_request(RequestKind.SIGNED, "rtm.auth.getFrob", config)
        assert request.as_dict()["format"] == "rest"

    def test_post(self, config):
        """Should keep the requested HTTP method."""
        request = build_request(RequestKind.PLAIN, "rtm.test.echo", config, http_method="post")
        assert request.http_method == "POST"

    def test_url_contains_query(self, config):
        """Should render the full GET URL."""
        request = build_request(RequestKind.PLAIN, "rtm.test.echo", config)
        assert request.url.startswith(REST_URL + "?")
        assert "method=rtm.test.echo" in request.url


class TestBuildAuthUrl:
    """Test the browser authorization URL."""

    def test_signed_url(self, config):
        """Should include api key, perms, frob and a matching signature."""
        url = build_auth_url(config, "delete", "FROB")
        parts = urlsplit(url)
        assert url.startswith("https://www.rememberthemilk.com/services/auth/")

        params = dict(parse_qsl(parts.query))
        signature = params.pop("api_sig")
        assert params == {"api_key": "K", "perms": "delete", "frob": "FROB"}
        assert signature == sign(ParameterSet(params), "S")

    def test_requires_secret(self):
        """Should refuse to build an unsigned URL."""
        with pytest.raises(ConfigurationError):
            build_auth_url(RtmConfig(api_key="K"), "read", "FROB")


class TestRtmConfig:
    """Test configuration validation."""

    def test_requires_api_key(self):
        """Should refuse an empty api key."""
        with pytest.raises(ConfigurationError, match="api_key is required"):
            RtmConfig(api_key="")

    def test_unknown_format(self):
        """Should refuse unknown response formats."""
        with pytest.raises(ConfigurationError, match="Unknown response format"):
            RtmConfig(api_key="K", response_format="yaml")

    def test_with_token(self, config):
        """Should return a copy bound to the new token."""
        other = config.with_token("T2")
        assert other.token == "T2"
        assert config.token == "T"
