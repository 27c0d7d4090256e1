"""Unit tests for the OAuth code exchange, with the HTTP session mocked."""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
import requests

from platform_adapter.config import UpstreamConfig
from platform_adapter.exceptions import ExternalServiceError, RepositoryError
from platform_adapter.services.oauth_service import OAuthService
from tests.fixtures.fakes import FakeTokenStore


@pytest.fixture
def upstream_config():
    return UpstreamConfig(
        base_url="https://api.market.test/",
        client_id="cid",
        client_secret="csecret",
        redirect_uri="https://adapter.test/oauth/callback",
    )


@pytest.fixture
def token_store():
    return FakeTokenStore()


@pytest.fixture
def http_session():
    return Mock(spec=requests.Session)


@pytest.fixture
def oauth(upstream_config, token_store, http_session):
    return OAuthService(upstream_config, token_store, session=http_session)


def _response(status_code=200, payload=None, text=""):
    response = Mock()
    response.status_code = status_code
    response.text = text
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


def test_redirect_uri(oauth):
    assert oauth.redirect_uri == "https://adapter.test/oauth/callback"


class TestExchangeCode:
    def test_stores_token_for_user(self, oauth, http_session, token_store):
        http_session.post.return_value = _response(
            payload={
                "access_token": "at",
                "refresh_token": "rt",
                "token_type": "Bearer",
                "expires_in": 3600,
                "user_id": "shop_42",
            }
        )

        assert oauth.exchange_code("the-code") == "shop_42"

        args, kwargs = http_session.post.call_args
        assert args[0] == "https://api.market.test/oauth/token"
        assert kwargs["data"] == {
            "grant_type": "authorization_code",
            "code": "the-code",
            "client_id": "cid",
            "client_secret": "csecret",
            "redirect_uri": "https://adapter.test/oauth/callback",
        }

        token = token_store.tokens["shop_42"]
        assert token.access_token == "at"
        assert token.refresh_token == "rt"
        expected = datetime.now(timezone.utc) + timedelta(seconds=3600)
        assert abs((token.expires_at - expected).total_seconds()) < 5

    def test_non_200(self, oauth, http_session):
        http_session.post.return_value = _response(400, text="invalid_grant")

        with pytest.raises(ExternalServiceError) as exc_info:
            oauth.exchange_code("bad")

        assert "status=400" in exc_info.value.message
        assert "invalid_grant" in exc_info.value.message

    def test_unparseable(self, oauth, http_session):
        http_session.post.return_value = _response(payload=ValueError("no json"))

        with pytest.raises(ExternalServiceError) as exc_info:
            oauth.exchange_code("c")

        assert exc_info.value.message.startswith("failed to parse token response")

    def test_missing_user_id(self, oauth, http_session, token_store):
        http_session.post.return_value = _response(payload={"access_token": "at"})

        with pytest.raises(ExternalServiceError) as exc_info:
            oauth.exchange_code("c")

        assert exc_info.value.message == "token response missing user_id"
        assert token_store.saved == []

    def test_transport_error(self, oauth, http_session):
        http_session.post.side_effect = requests.ConnectionError("down")

        with pytest.raises(ExternalServiceError):
            oauth.exchange_code("c")

    def test_store_failure(self, oauth, http_session, token_store):
        http_session.post.return_value = _response(
            payload={"access_token": "at", "expires_in": 60, "user_id": "shop_1"}
        )
        token_store.save_error = RepositoryError("disk full")

        with pytest.raises(ExternalServiceError) as exc_info:
            oauth.exchange_code("c")

        assert exc_info.value.message == "failed to save token: disk full"
