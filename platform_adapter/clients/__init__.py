from .marketplace_client import MarketplaceClient, TokenStore

__all__ = ["MarketplaceClient", "TokenStore"]
