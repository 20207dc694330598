"""
Invite component - Community invite issuance, validation and acceptance.
"""

from .component import (
    INVALID_INVITE,
    new_invite_token,
    run,
    run_accept,
    run_create,
    run_list_pending,
    run_validate,
)
from .models import (
    AcceptInviteInput,
    AcceptOutput,
    CreateInviteInput,
    InviteListOutput,
    InviteOutput,
    ListPendingInput,
    ValidateInviteInput,
    ValidateOutput,
)
from .ports import (
    CommunityRepoPort,
    InviteRepoPort,
    MemberRepoPort,
    TimePort,
)

__all__ = [
    # Entry points
    "run",
    "run_create",
    "run_validate",
    "run_accept",
    "run_list_pending",
    "new_invite_token",
    "INVALID_INVITE",
    # Input models
    "CreateInviteInput",
    "ValidateInviteInput",
    "AcceptInviteInput",
    "ListPendingInput",
    # Output models
    "InviteOutput",
    "ValidateOutput",
    "AcceptOutput",
    "InviteListOutput",
    # Ports
    "InviteRepoPort",
    "MemberRepoPort",
    "CommunityRepoPort",
    "TimePort",
]
