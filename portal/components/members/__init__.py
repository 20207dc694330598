"""
Members component - Member self-lookup, directory listing and administration.
"""

from .component import (
    run,
    run_create_member,
    run_get_self,
    run_list_members,
    run_update_role,
    run_update_status,
)
from .models import (
    CreateMemberInput,
    GetSelfInput,
    ListMembersInput,
    MemberListOutput,
    MemberOutput,
    UpdateMemberRoleInput,
    UpdateMemberStatusInput,
)
from .ports import CommunityReaderPort, MemberAdminPort, MemberDirectoryPort, TimePort

__all__ = [
    "run",
    "run_get_self",
    "run_list_members",
    "run_create_member",
    "run_update_status",
    "run_update_role",
    "GetSelfInput",
    "ListMembersInput",
    "CreateMemberInput",
    "UpdateMemberStatusInput",
    "UpdateMemberRoleInput",
    "MemberOutput",
    "MemberListOutput",
    "MemberDirectoryPort",
    "MemberAdminPort",
    "CommunityReaderPort",
    "TimePort",
]
