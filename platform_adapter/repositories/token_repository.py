from typing import Optional

from sqlalchemy.orm import Session

from ..db.db_token_models import Token
from ..schemas.token_schema import TokenRead
from ..utils.crud_helpers import create_record, get_record
from .base_repository import BaseRepository


class TokenRepository(BaseRepository[Token]):
    """Storage for per-shop OAuth tokens."""

    def __init__(self, session: Session):
        super().__init__(session, Token)

    def find_by_shop_id(self, shop_id: str) -> Optional[TokenRead]:
        try:
            record = get_record(self.session, Token, {"shop_id": shop_id})
            return TokenRead.model_validate(record) if record else None
        except Exception as e:
            self._handle_db_error(e, "find_by_shop_id", shop_id=shop_id)

    def save(self, token: TokenRead) -> TokenRead:
        """Insert or update the token for ``token.shop_id``."""
        try:
            record = get_record(self.session, Token, {"shop_id": token.shop_id})
            if record is None:
                record = create_record(
                    self.session,
                    Token,
                    {
                        "shop_id": token.shop_id,
                        "access_token": token.access_token,
                        "refresh_token": token.refresh_token,
                        "token_type": token.token_type,
                        "expires_at": token.expires_at,
                    },
                )
            else:
                record.access_token = token.access_token
                record.refresh_token = token.refresh_token
                record.token_type = token.token_type
                record.expires_at = token.expires_at
                self.session.commit()

            self.logger.info("Saved token", extra={"shop_id": token.shop_id})
            return TokenRead.model_validate(record)
        except Exception as e:
            self._handle_db_error(e, "save", shop_id=token.shop_id)

    def delete(self, shop_id: str) -> bool:
        try:
            record = get_record(self.session, Token, {"shop_id": shop_id})
            if record is None:
                return False
            self.session.delete(record)
            self.session.commit()
            return True
        except Exception as e:
            self._handle_db_error(e, "delete", shop_id=shop_id)
