"""SQLAlchemy models and database management."""

from .db_config import (
    Base,
    DatabaseConfig,
    DatabaseManager,
    close_db,
    get_db_manager,
    import_all_models,
    init_db,
    initialize_db,
)
from .db_field_mapping_models import FieldMapping
from .db_token_models import Token
from .db_trusted_service_models import TrustedService

__all__ = [
    "Base",
    "DatabaseConfig",
    "DatabaseManager",
    "FieldMapping",
    "Token",
    "TrustedService",
    "close_db",
    "get_db_manager",
    "import_all_models",
    "init_db",
    "initialize_db",
]
