"""API-key authentication and action authorization for RPC callers."""

from typing import Optional, Protocol

from ..exceptions import BaseError, ForbiddenError, UnauthorizedError
from ..schemas.trusted_service_schema import TrustedServiceRead
from ..utils.logger import get_logger


class TrustedServiceStore(Protocol):
    def find_by_api_key(self, api_key: str) -> Optional[TrustedServiceRead]: ...


class AuthService:
    """Checks callers against the trusted service store."""

    def __init__(self, store: TrustedServiceStore):
        self.store = store
        self.logger = get_logger()

    def validate_api_key(self, api_key: str) -> TrustedServiceRead:
        """
        Resolve ``api_key`` to an active trusted service.

        Raises:
            UnauthorizedError: If the key is empty, unknown, inactive or the
                lookup fails
        """
        if not api_key:
            raise UnauthorizedError("missing api_key")

        try:
            service = self.store.find_by_api_key(api_key)
        except BaseError as e:
            raise UnauthorizedError(f"failed to validate api_key: {e.message}", cause=e) from e

        if service is None:
            raise UnauthorizedError("invalid api_key")
        if not service.is_active:
            raise UnauthorizedError("service is inactive", service_name=service.name)
        return service

    def validate_action(self, service: TrustedServiceRead, action: str) -> None:
        """
        Raises:
            ForbiddenError: If ``service`` may not perform ``action``
        """
        if not service.can_perform_action(action):
            raise ForbiddenError(
                f"action '{action}' not allowed for service '{service.name}'",
                action=action,
                service_name=service.name,
            )
