from typing import Protocol
from uuid import UUID


class IdentityServicePort(Protocol):
    def verify_access_token(self, token: str) -> UUID | None:
        """Return the identity a bearer token was issued to, or None if it does not verify."""
        ...
