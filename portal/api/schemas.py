from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from portal.domain.entities import MemberRole, MemberStatus


# --- Invites ---
class InviteCreateRequest(BaseModel):
    # Checked by the component after authentication (401 before 400)
    community_id: UUID | None = None
    expires_at: datetime | None = None


class InviteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    community_id: UUID
    invite_token: str
    used: bool
    created_at: datetime
    expires_at: datetime | None = None
    created_by: UUID | None = None


class InviteLookupResponse(InviteResponse):
    is_used: bool
    is_expired: bool


class InviteAcceptRequest(BaseModel):
    invite_token: str | None = None
    # Optional echo of the caller's identity; must match the resolved one
    identity: UUID | None = None


class InviteAcceptResponse(BaseModel):
    success: bool
    community_id: UUID


# --- Communities ---
class CommunityCreateRequest(BaseModel):
    name: str
    logo_url: str | None = None
    favicon_url: str | None = None


class CommunityUpdateRequest(BaseModel):
    name: str | None = None
    logo_url: str | None = None
    favicon_url: str | None = None


class CommunityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    logo_url: str | None = None
    favicon_url: str | None = None
    created_at: datetime
    updated_at: datetime


class BrandingResponse(BaseModel):
    name: str
    logo_url: str | None = None
    favicon_url: str | None = None


# --- Members ---
class MemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    first_name: str
    last_name: str
    role: MemberRole
    status: MemberStatus
    community_id: UUID | None = None
    created_at: datetime
    updated_at: datetime


class MemberCreateRequest(BaseModel):
    # Missing fields are reported by the component as 400, after authentication
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    role: str = ""
    status: str = ""
    community_id: UUID | None = None
    id: UUID | None = None


class MemberStatusRequest(BaseModel):
    status: str = ""


class MemberRoleRequest(BaseModel):
    role: str = ""


# --- Notifications ---
class NotificationCreateRequest(BaseModel):
    member_id: UUID | None = None
    title: str = ""
    content: str = ""
    type: str = ""
    link: str | None = None


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    member_id: UUID
    title: str
    content: str
    type: str
    link: str | None = None
    is_read: bool
    created_at: datetime


class SuccessResponse(BaseModel):
    success: bool


class MarkReadResponse(BaseModel):
    success: bool
    updated: int
