"""
Built-in RPC handlers.

``api_request`` proxies an arbitrary marketplace call and maps the result to
the caller's platform schema; ``create_product`` maps a product back to the
canonical schema and creates it for the shop.
"""

from typing import Any, Dict

from ..clients.marketplace_client import MarketplaceClient
from ..constants import DEFAULT_PLATFORM_ID, Action, ResponseErrorCode
from ..context.operation_context import operation
from ..exceptions import BaseError, ExternalServiceError, MappingError
from ..mapping.field_mapper import FieldMapper
from ..messaging.dispatcher import BrokerDispatcher
from ..messaging.envelope import RequestEnvelope, ResponseEnvelope
from ..utils.logger import get_logger
from .auth_service import AuthService


def resolve_platform_id(request: RequestEnvelope) -> str:
    """Request platform, else ``params.platform``, else ``"default"``; trimmed and lower-cased."""
    platform = request.platform.strip()
    if platform:
        return platform.lower()

    param_platform = request.params.get("platform")
    if isinstance(param_platform, str) and param_platform.strip():
        return param_platform.strip().lower()
    return DEFAULT_PLATFORM_ID


def _non_empty_str(params: Dict[str, Any], key: str) -> str:
    value = params.get(key)
    return value if isinstance(value, str) and value else ""


def _error_response(request: RequestEnvelope, error: BaseError) -> ResponseEnvelope:
    return ResponseEnvelope.failure(error.response_code, error.message, request.request_id)


class RequestHandlerService:
    """Handlers for the ``api_request`` and ``create_product`` actions."""

    def __init__(self, auth: AuthService, marketplace: MarketplaceClient, mapper: FieldMapper):
        self.auth = auth
        self.marketplace = marketplace
        self.mapper = mapper
        self.logger = get_logger()

    def register_handlers(self, dispatcher: BrokerDispatcher) -> None:
        dispatcher.register_handler(Action.API_REQUEST.value, self.handle_api_request)
        dispatcher.register_handler(Action.CREATE_PRODUCT.value, self.handle_create_product)

    def _authorize(self, request: RequestEnvelope, action: Action) -> None:
        service = self.auth.validate_api_key(request.api_key)
        self.auth.validate_action(service, action.value)

    @operation()
    def handle_api_request(self, request: RequestEnvelope) -> ResponseEnvelope:
        """
        Generic proxy to the marketplace API.

        Params:
            path: API path, required
            method: HTTP method, defaults to GET
            entity_type: entity type used for field mapping
            entity_key: key of the result holding a list of entities to map
        """
        try:
            self._authorize(request, Action.API_REQUEST)
        except BaseError as e:
            return _error_response(request, e)

        params = request.params
        path = _non_empty_str(params, "path")
        if not path:
            return ResponseEnvelope.failure(
                ResponseErrorCode.BAD_REQUEST, "path is required in params", request.request_id
            )
        method = (_non_empty_str(params, "method") or "GET").upper()

        try:
            result = self.marketplace.request(method, path, request.shop_id)
        except ExternalServiceError as e:
            return _error_response(request, e)

        entity_type = _non_empty_str(params, "entity_type")
        entity_key = _non_empty_str(params, "entity_key")
        platform_id = resolve_platform_id(request)

        if entity_type and entity_key:
            entities = result.get(entity_key)
            if isinstance(entities, list):
                result[entity_key] = [
                    self._map_entity(platform_id, entity_type, entity) for entity in entities
                ]
        elif entity_type:
            try:
                result = self.mapper.transform(platform_id, entity_type, result)
            except MappingError as e:
                self.logger.warning(
                    "Mapping failed, returning raw result",
                    extra={
                        "platform_id": platform_id,
                        "entity_type": entity_type,
                        "error_id": e.error_id,
                    },
                )

        return ResponseEnvelope.ok(result, request.request_id)

    def _map_entity(self, platform_id: str, entity_type: str, entity: Any) -> Any:
        if not isinstance(entity, dict):
            return entity
        try:
            return self.mapper.transform(platform_id, entity_type, entity)
        except MappingError:
            return entity

    @operation()
    def handle_create_product(self, request: RequestEnvelope) -> ResponseEnvelope:
        """
        Create a product for ``request.shop_id``.

        Params:
            product: product object, required
            entity_type: entity type used for reverse field mapping
        """
        try:
            self._authorize(request, Action.CREATE_PRODUCT)
        except BaseError as e:
            return _error_response(request, e)

        product = request.params.get("product")
        if not isinstance(product, dict):
            return ResponseEnvelope.failure(
                ResponseErrorCode.BAD_REQUEST,
                "product data is required in params",
                request.request_id,
            )

        entity_type = _non_empty_str(request.params, "entity_type")
        if entity_type:
            platform_id = resolve_platform_id(request)
            try:
                product = self.mapper.reverse_transform(platform_id, entity_type, product)
            except MappingError as e:
                self.logger.warning(
                    "Reverse mapping failed, sending raw product",
                    extra={
                        "platform_id": platform_id,
                        "entity_type": entity_type,
                        "error_id": e.error_id,
                    },
                )

        path = f"/sellers/{request.shop_id}/products"
        try:
            result = self.marketplace.request_with_body("POST", path, request.shop_id, product)
        except ExternalServiceError as e:
            return _error_response(request, e)

        return ResponseEnvelope.ok(result, request.request_id)
