from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import WILDCARD_ACTION


class TrustedServiceRead(BaseModel):
    """An authorized caller identified by its API key."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    api_key: str
    name: str
    allowed_actions: List[str] = Field(default_factory=list)
    is_active: bool = True
    created_at: Optional[datetime] = None

    @field_validator("allowed_actions", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or []

    def can_perform_action(self, action: str) -> bool:
        """Active services may perform listed actions, or anything with a wildcard."""
        if not self.is_active:
            return False
        return any(a == action or a == WILDCARD_ACTION for a in self.allowed_actions)
