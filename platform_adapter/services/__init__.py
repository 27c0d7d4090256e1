"""Services composing the stores, the marketplace client and the mapper."""

from .auth_service import AuthService
from .mapping_service import MappingService
from .oauth_service import OAuthService
from .request_handler_service import RequestHandlerService, resolve_platform_id
from .webhook_service import WebhookResponse, WebhookService

__all__ = [
    "AuthService",
    "MappingService",
    "OAuthService",
    "RequestHandlerService",
    "WebhookResponse",
    "WebhookService",
    "resolve_platform_id",
]
