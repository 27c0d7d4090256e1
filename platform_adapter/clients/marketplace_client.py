"""
HTTP client for the canonical marketplace API.

Requests are scoped to a shop: the shop's OAuth token is looked up, refreshed
when it is about to expire, and refreshed once more if the API answers 401.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Protocol

import requests

from ..config import UpstreamConfig
from ..exceptions import BaseError, ExternalServiceError
from ..schemas.token_schema import TokenRead
from ..utils.logger import get_logger

MARKETPLACE_SERVICE_NAME = "marketplace"
TOKEN_PATH = "/oauth/token"


class TokenStore(Protocol):
    def find_by_shop_id(self, shop_id: str) -> Optional[TokenRead]: ...

    def save(self, token: TokenRead) -> TokenRead: ...


def _api_error(message: str, cause: Optional[Exception] = None, **context) -> ExternalServiceError:
    return ExternalServiceError(
        message, service_name=MARKETPLACE_SERVICE_NAME, cause=cause, **context
    )


class MarketplaceClient:
    """Authenticated client for the marketplace REST API."""

    def __init__(
        self,
        config: UpstreamConfig,
        token_store: TokenStore,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self.base_url = config.base_url
        self.timeout = config.timeout
        self.token_store = token_store
        self.session = session or requests.Session()
        self.logger = get_logger()

    def request(self, method: str, path: str, shop_id: str) -> Dict[str, Any]:
        """
        Call ``{base_url}{path}`` on behalf of ``shop_id``.

        Raises:
            ExternalServiceError: On a missing token, a failed refresh, a
                transport error, a non-2xx status or a non-object JSON body
        """
        return self._do_request(method, path, shop_id, None)

    def request_with_body(
        self, method: str, path: str, shop_id: str, body: Any
    ) -> Dict[str, Any]:
        """Same as ``request`` with ``body`` sent as JSON."""
        return self._do_request(method, path, shop_id, body)

    def _do_request(
        self, method: str, path: str, shop_id: str, body: Optional[Any]
    ) -> Dict[str, Any]:
        try:
            token = self.token_store.find_by_shop_id(shop_id)
        except BaseError as e:
            raise _api_error(
                f"failed to get token: {e.message}", cause=e, shop_id=shop_id
            ) from e
        if token is None:
            raise _api_error(f"no token found for shop={shop_id}", shop_id=shop_id)

        if token.should_refresh(self.config.refresh_margin_seconds):
            token = self._refresh_token(token, "failed to refresh token")

        response = self._send(method, path, token.access_token, body)

        if response.status_code == 401:
            self.logger.info(
                "Marketplace answered 401, refreshing token",
                extra={"shop_id": shop_id, "path": path},
            )
            token = self._refresh_token(token, "failed to refresh token after 401")
            response = self._send(method, path, token.access_token, body)

        if not 200 <= response.status_code < 300:
            raise _api_error(
                f"API error: status={response.status_code} body={response.text}",
                upstream_status=response.status_code,
                method=method,
                path=path,
            )

        try:
            result = response.json()
        except ValueError as e:
            raise _api_error(
                f"failed to parse response: {str(e)}", cause=e, path=path
            ) from e
        if not isinstance(result, dict):
            raise _api_error(
                f"failed to parse response: expected a JSON object, got {type(result).__name__}",
                path=path,
            )
        return result

    def _send(
        self, method: str, path: str, access_token: str, body: Optional[Any]
    ) -> requests.Response:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }
        try:
            return self.session.request(
                method,
                f"{self.base_url}{path}",
                headers=headers,
                json=body,
                timeout=self.timeout,
            )
        except (requests.RequestException, ValueError) as e:
            # ValueError: urllib3 rejects methods with non-token characters
            raise _api_error(
                f"request failed: {str(e)}", cause=e, method=method, path=path
            ) from e

    def _refresh_token(self, token: TokenRead, failure_prefix: str) -> TokenRead:
        form = {
            "grant_type": "refresh_token",
            "refresh_token": token.refresh_token or "",
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
        }
        try:
            response = self.session.post(
                f"{self.base_url}{TOKEN_PATH}", data=form, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise _api_error(f"{failure_prefix}: {str(e)}", cause=e, shop_id=token.shop_id) from e

        if response.status_code != 200:
            raise _api_error(
                f"{failure_prefix}: token refresh failed: "
                f"status={response.status_code} body={response.text}",
                shop_id=token.shop_id,
                upstream_status=response.status_code,
            )

        try:
            payload = response.json()
            if not isinstance(payload, dict):
                raise ValueError("token response is not a JSON object")
            expires_in = int(payload.get("expires_in") or 0)
        except (ValueError, TypeError) as e:
            raise _api_error(f"{failure_prefix}: {str(e)}", cause=e, shop_id=token.shop_id) from e

        refreshed = token.model_copy(
            update={
                "access_token": payload.get("access_token") or "",
                "refresh_token": payload.get("refresh_token") or token.refresh_token,
                "token_type": payload.get("token_type") or token.token_type,
                "expires_at": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
            }
        )

        try:
            saved = self.token_store.save(refreshed)
        except BaseError as e:
            raise _api_error(
                f"{failure_prefix}: failed to save refreshed token: {e.message}",
                cause=e,
                shop_id=token.shop_id,
            ) from e

        self.logger.info("Refreshed marketplace token", extra={"shop_id": token.shop_id})
        return saved

    def close(self) -> None:
        self.session.close()
