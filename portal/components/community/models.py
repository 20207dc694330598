from dataclasses import dataclass, field
from uuid import UUID

from portal.domain.entities import Community
from portal.domain.errors import ErrorCode


@dataclass
class ListCommunitiesInput:
    requester: UUID | None


@dataclass
class CreateCommunityInput:
    requester: UUID | None
    name: str
    logo_url: str | None = None
    favicon_url: str | None = None


@dataclass
class GetBrandingInput:
    community_id: UUID


@dataclass
class UpdateCommunityInput:
    requester: UUID | None
    community_id: UUID
    # None leaves the field unchanged
    name: str | None = None
    logo_url: str | None = None
    favicon_url: str | None = None


@dataclass
class DeleteCommunityInput:
    requester: UUID | None
    community_id: UUID


@dataclass
class CommunityOutput:
    community: Community | None = None
    success: bool = False
    error: str | None = None
    error_code: ErrorCode | None = None


@dataclass
class CommunityListOutput:
    communities: list[Community] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    error_code: ErrorCode | None = None


@dataclass
class BrandingOutput:
    name: str | None = None
    logo_url: str | None = None
    favicon_url: str | None = None
    success: bool = False
    error: str | None = None
    error_code: ErrorCode | None = None


@dataclass
class DeleteOutput:
    success: bool = False
    error: str | None = None
    error_code: ErrorCode | None = None
