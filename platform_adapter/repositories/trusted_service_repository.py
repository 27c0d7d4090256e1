from typing import List, Optional

from sqlalchemy.orm import Session

from ..db.db_trusted_service_models import TrustedService
from ..schemas.trusted_service_schema import TrustedServiceRead
from ..utils.crud_helpers import create_record, get_record
from .base_repository import BaseRepository


class TrustedServiceRepository(BaseRepository[TrustedService]):
    """Storage for API-key authenticated callers."""

    def __init__(self, session: Session):
        super().__init__(session, TrustedService)

    def find_by_api_key(self, api_key: str) -> Optional[TrustedServiceRead]:
        """Return the service owning ``api_key``, or None."""
        try:
            record = get_record(self.session, TrustedService, {"api_key": api_key})
            return TrustedServiceRead.model_validate(record) if record else None
        except Exception as e:
            self._handle_db_error(e, "find_by_api_key")

    def create(
        self,
        api_key: str,
        name: str,
        allowed_actions: List[str],
        is_active: bool = True,
    ) -> TrustedServiceRead:
        try:
            record = create_record(
                self.session,
                TrustedService,
                {
                    "api_key": api_key,
                    "name": name,
                    "allowed_actions": list(allowed_actions),
                    "is_active": is_active,
                },
            )
            return TrustedServiceRead.model_validate(record)
        except Exception as e:
            self._handle_db_error(e, "create", service_name=name)
