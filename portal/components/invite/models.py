from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from portal.domain.entities import Invite
from portal.domain.errors import ErrorCode


@dataclass
class CreateInviteInput:
    community_id: UUID | None
    requester: UUID | None
    expires_at: datetime | None = None


@dataclass
class ValidateInviteInput:
    token: str


@dataclass
class AcceptInviteInput:
    token: str
    identity: UUID | None


@dataclass
class ListPendingInput:
    community_id: UUID
    requester: UUID | None


@dataclass
class InviteOutput:
    invite: Invite | None = None
    success: bool = False
    error: str | None = None
    error_code: ErrorCode | None = None


@dataclass
class ValidateOutput:
    invite: Invite | None = None
    is_used: bool = False
    is_expired: bool = False
    success: bool = False
    error: str | None = None
    error_code: ErrorCode | None = None

    @property
    def is_acceptable(self) -> bool:
        return self.success and not self.is_used and not self.is_expired


@dataclass
class AcceptOutput:
    community_id: UUID | None = None
    success: bool = False
    error: str | None = None
    error_code: ErrorCode | None = None
    # Set when the member write failed and the claim could not be released
    needs_reconciliation: bool = False


@dataclass
class InviteListOutput:
    invites: list[Invite] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    error_code: ErrorCode | None = None
