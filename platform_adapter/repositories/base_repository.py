"""
Base repository with the error mapping shared by all repositories.
"""

from typing import Any, Generic, NoReturn, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import ErrorCode, RepositoryError
from ..utils.logger import get_logger

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Base repository over one SQLAlchemy model."""

    def __init__(self, session: Session, entity_class: Type[T]):
        """
        Initialize the base repository.

        Args:
            session: SQLAlchemy session, or a ``scoped_session`` registry so
                each thread uses its own session
            entity_class: SQLAlchemy model class this repository handles
        """
        self.session = session
        self.entity_class = entity_class
        self.entity_name = entity_class.__name__
        self.logger = get_logger()

    def _handle_db_error(
        self,
        e: Exception,
        operation_name: str,
        entity_id: Optional[str] = None,
        **context: Any,
    ) -> NoReturn:
        """
        Map a database exception to a RepositoryError and raise it.

        Raises:
            RepositoryError: With DUPLICATE for unique violations, DATABASE_ERROR otherwise
        """
        if isinstance(e, RepositoryError):
            raise e

        self.session.rollback()

        error_context = {
            "operation_name": operation_name,
            "model": self.entity_name,
            **context,
        }
        if entity_id:
            error_context["entity_id"] = entity_id

        if isinstance(e, IntegrityError):
            raise RepositoryError(
                f"Constraint violation for {self.entity_name}: {str(e.orig)}",
                error_code=ErrorCode.DUPLICATE,
                status_code=409,
                cause=e,
                **error_context,
            )

        if isinstance(e, SQLAlchemyError):
            raise RepositoryError(
                f"Database error for {self.entity_name}: {str(e)}",
                error_code=ErrorCode.DATABASE_ERROR,
                cause=e,
                **error_context,
            )

        raise RepositoryError(
            f"Unexpected error in {operation_name} for {self.entity_name}: {str(e)}",
            error_code=ErrorCode.INTERNAL_ERROR,
            cause=e,
            **error_context,
        )
