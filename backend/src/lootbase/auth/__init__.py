"""Authentication event types."""

from lootbase.auth.types import PROVIDER_ID_KEY, ExternalAuthMeta, UserContext

__all__ = ["ExternalAuthMeta", "PROVIDER_ID_KEY", "UserContext"]
