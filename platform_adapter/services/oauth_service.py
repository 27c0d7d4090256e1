"""OAuth authorization-code exchange with the marketplace."""

from datetime import datetime, timedelta, timezone

import requests

from ..clients.marketplace_client import MARKETPLACE_SERVICE_NAME, TOKEN_PATH, TokenStore
from ..config import UpstreamConfig
from ..context.operation_context import operation
from ..exceptions import BaseError, ExternalServiceError
from ..schemas.token_schema import TokenRead
from ..utils.logger import get_logger


class OAuthService:
    """Exchanges authorization codes for shop tokens and stores them."""

    def __init__(self, config: UpstreamConfig, token_store: TokenStore, session=None):
        self.config = config
        self.token_store = token_store
        self.session = session or requests.Session()
        self.logger = get_logger()

    @property
    def redirect_uri(self) -> str:
        return self.config.redirect_uri

    def _error(self, message: str, cause=None, **context) -> ExternalServiceError:
        return ExternalServiceError(
            message, service_name=MARKETPLACE_SERVICE_NAME, cause=cause, **context
        )

    @operation()
    def exchange_code(self, code: str) -> str:
        """
        Exchange ``code`` for tokens and store them.

        Returns:
            The shop id, which is the ``user_id`` of the token response

        Raises:
            ExternalServiceError: If the exchange fails or the token cannot be stored
        """
        form = {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "redirect_uri": self.config.redirect_uri,
        }
        try:
            response = self.session.post(
                f"{self.config.base_url}{TOKEN_PATH}", data=form, timeout=self.config.timeout
            )
        except requests.RequestException as e:
            raise self._error(f"failed to exchange code: {str(e)}", cause=e) from e

        if response.status_code != 200:
            raise self._error(
                f"token exchange failed: status={response.status_code} body={response.text}",
                upstream_status=response.status_code,
            )

        try:
            payload = response.json()
            if not isinstance(payload, dict):
                raise ValueError("token response is not a JSON object")
            expires_in = int(payload.get("expires_in") or 0)
        except (ValueError, TypeError) as e:
            raise self._error(f"failed to parse token response: {str(e)}", cause=e) from e

        shop_id = payload.get("user_id")
        if not isinstance(shop_id, str) or not shop_id:
            raise self._error("token response missing user_id")

        token = TokenRead(
            shop_id=shop_id,
            access_token=payload.get("access_token") or "",
            refresh_token=payload.get("refresh_token"),
            token_type=payload.get("token_type") or "Bearer",
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        )
        try:
            self.token_store.save(token)
        except BaseError as e:
            raise self._error(f"failed to save token: {e.message}", cause=e, shop_id=shop_id) from e

        self.logger.info("Stored marketplace token", extra={"shop_id": shop_id})
        return shop_id
