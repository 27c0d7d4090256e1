"""
Process assembly for the adapter.

Wires configuration, the database, both broker connections, the services and
the RPC handlers, and tears them down in reverse order on shutdown.
"""

import signal
import threading
from typing import Optional

from .clients.marketplace_client import MarketplaceClient
from .config import AppConfig, get_config
from .db.db_config import DatabaseConfig, DatabaseManager, get_database_config, init_db
from .mapping.cache import MappingRuleCache
from .mapping.field_mapper import FieldMapper
from .messaging.dispatcher import BrokerDispatcher
from .messaging.publisher import Publisher
from .messaging.request_client import RequestClient
from .repositories.field_mapping_repository import FieldMappingRepository
from .repositories.token_repository import TokenRepository
from .repositories.trusted_service_repository import TrustedServiceRepository
from .services.auth_service import AuthService
from .services.mapping_service import MappingService
from .services.oauth_service import OAuthService
from .services.request_handler_service import RequestHandlerService
from .services.webhook_service import WebhookService
from .utils.logger import configure_logging


class AdapterApplication:
    """Owns every long-lived component of one adapter process."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        db_config: Optional[DatabaseConfig] = None,
        publisher: Optional[Publisher] = None,
        dispatcher: Optional[BrokerDispatcher] = None,
    ):
        self.config = config or get_config()
        self.logger = configure_logging("platform_adapter")

        self.db_manager = DatabaseManager(db_config or get_database_config())
        init_db(self.db_manager)
        session = self.db_manager.scoped_session

        self.field_mapping_repository = FieldMappingRepository(session)
        self.token_repository = TokenRepository(session)
        self.trusted_service_repository = TrustedServiceRepository(session)

        self.mapper = FieldMapper(
            self.field_mapping_repository,
            MappingRuleCache(ttl_seconds=self.config.mapper.cache_ttl_seconds),
        )
        self.marketplace = MarketplaceClient(self.config.upstream, self.token_repository)
        self.auth = AuthService(self.trusted_service_repository)
        self.request_handlers = RequestHandlerService(self.auth, self.marketplace, self.mapper)
        self.mapping_service = MappingService(self.field_mapping_repository, self.mapper)
        self.oauth_service = OAuthService(self.config.upstream, self.token_repository)

        self.publisher = publisher or Publisher.connect(self.config.broker)
        self.webhook_service = WebhookService(
            self.config.webhook.secret, self.publisher, self.mapper
        )
        self.dispatcher = dispatcher or BrokerDispatcher.connect(
            self.config.broker, self.publisher
        )

        self._request_client: Optional[RequestClient] = None
        self._stopped = threading.Event()

    def request_client(self, api_key: str = "") -> RequestClient:
        """Lazily open a request client sharing this process's publisher."""
        if self._request_client is None:
            self._request_client = RequestClient.connect(
                self.config.broker, self.publisher, api_key=api_key
            )
        return self._request_client

    def start(self) -> None:
        self.request_handlers.register_handlers(self.dispatcher)
        self.dispatcher.start()
        self.logger.info(
            "Adapter started",
            extra={"environment": self.config.environment, "actions": self.dispatcher.actions},
        )

    def stop(self) -> None:
        """Close connections in reverse order of creation. Safe to call twice."""
        if self._stopped.is_set():
            return
        self._stopped.set()

        self.logger.info("Shutting down adapter")
        if self._request_client is not None:
            self._request_client.close()
        self.dispatcher.close()
        self.publisher.close()
        self.marketplace.close()
        self.db_manager.close()
        self.logger.info("Adapter stopped")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until ``stop()`` is called. Returns False on timeout."""
        return self._stopped.wait(timeout)


def main() -> None:
    app = AdapterApplication()

    def _handle_signal(signum, frame):
        app.logger.info("Received shutdown signal", extra={"signal": signum})
        app.stop()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    app.start()
    app.wait()


if __name__ == "__main__":
    main()
