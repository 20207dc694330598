from dataclasses import dataclass, field
from uuid import UUID

from portal.domain.entities import Member
from portal.domain.errors import ErrorCode


@dataclass
class GetSelfInput:
    requester: UUID | None


@dataclass
class ListMembersInput:
    requester: UUID | None
    all: bool = False


@dataclass
class CreateMemberInput:
    requester: UUID | None
    email: str
    first_name: str
    last_name: str
    role: str
    status: str
    community_id: UUID | None
    # Identity-service principal id; generated when the account is linked later
    member_id: UUID | None = None


@dataclass
class UpdateMemberStatusInput:
    requester: UUID | None
    member_id: UUID
    status: str


@dataclass
class UpdateMemberRoleInput:
    requester: UUID | None
    member_id: UUID
    role: str


@dataclass
class MemberOutput:
    member: Member | None = None
    success: bool = False
    error: str | None = None
    error_code: ErrorCode | None = None


@dataclass
class MemberListOutput:
    members: list[Member] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    error_code: ErrorCode | None = None
