from typing import Protocol
from uuid import UUID

from portal.ports.identity import IdentityServicePort

from .models import Credentials


class CredentialStrategy(Protocol):
    """One way of turning credentials into an identity."""

    name: str

    def resolve(self, credentials: Credentials) -> UUID | None:
        """Return the identity, or None when this strategy does not apply or fails."""
        ...


__all__ = ["CredentialStrategy", "IdentityServicePort"]
