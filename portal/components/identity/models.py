from collections.abc import Mapping
from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True)
class Credentials:
    """Credential material lifted off a request."""

    authorization: str | None = None
    cookies: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolveIdentityInput:
    credentials: Credentials


@dataclass
class IdentityOutput:
    identity: UUID | None = None
    strategy: str | None = None
    success: bool = False
