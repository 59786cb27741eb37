"""Type definitions for authentication events."""

from dataclasses import dataclass
from typing import Any

# Key of the provider's user id inside the raw auth metadata payload
PROVIDER_ID_KEY = "id"


@dataclass
class UserContext:
    """The authenticated actor of a request.

    Attributes:
        user_id: The authenticated user's record ID
        collection: The auth collection the user record lives in
    """

    user_id: str
    collection: str = "users"


@dataclass(frozen=True)
class ExternalAuthMeta:
    """Metadata attached to a successful external-provider authentication.

    Attributes:
        provider_id: The provider's user id, or None when the payload
            carried no usable id
        raw: The untouched payload as received from the provider
    """

    provider_id: str | None = None
    raw: Any = None

    @property
    def has_provider_id(self) -> bool:
        return self.provider_id is not None

    @classmethod
    def from_payload(cls, payload: Any) -> "ExternalAuthMeta":
        """Parse an untyped provider payload.

        Anything other than a mapping with a non-empty string under
        PROVIDER_ID_KEY yields an instance without a provider id.
        """
        if not isinstance(payload, dict):
            return cls(raw=payload)

        value = payload.get(PROVIDER_ID_KEY)
        if not isinstance(value, str) or not value:
            return cls(raw=payload)

        return cls(provider_id=value, raw=payload)
