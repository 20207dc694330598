from datetime import UTC, datetime
from typing import Literal, get_args
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
MemberRole = Literal["admin", "financial", "non_financial", "superadmin"]
MemberStatus = Literal["active", "inactive", "suspended", "pending"]

MEMBER_ROLES: tuple[str, ...] = get_args(MemberRole)
MEMBER_STATUSES: tuple[str, ...] = get_args(MemberStatus)


def utcnow() -> datetime:
    return datetime.now(UTC)


# --- Communities ---


class Community(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str
    logo_url: str | None = None
    favicon_url: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# --- Members ---


class Member(BaseModel):
    # Shares its id with the identity-service principal
    id: UUID
    email: str
    first_name: str = ""
    last_name: str = ""
    role: MemberRole = "financial"
    status: MemberStatus = "active"
    community_id: UUID | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# --- Invites ---


class Invite(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    community_id: UUID
    invite_token: str
    expires_at: datetime | None = None
    used: bool = False
    created_by: UUID | None = None
    used_by: UUID | None = None
    used_at: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now


# --- Notifications ---


class Notification(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    member_id: UUID
    title: str
    content: str
    type: str
    link: str | None = None
    is_read: bool = False
    created_at: datetime = Field(default_factory=utcnow)
