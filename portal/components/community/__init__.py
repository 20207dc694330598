"""
Community component - Community records and public branding.
"""

from .component import (
    run,
    run_create,
    run_delete,
    run_get_branding,
    run_list,
    run_update,
)
from .models import (
    BrandingOutput,
    CommunityListOutput,
    CommunityOutput,
    CreateCommunityInput,
    DeleteCommunityInput,
    DeleteOutput,
    GetBrandingInput,
    ListCommunitiesInput,
    UpdateCommunityInput,
)
from .ports import CommunityRepoPort, MemberReaderPort, TimePort

__all__ = [
    # Entry points
    "run",
    "run_list",
    "run_create",
    "run_get_branding",
    "run_update",
    "run_delete",
    # Input models
    "ListCommunitiesInput",
    "CreateCommunityInput",
    "GetBrandingInput",
    "UpdateCommunityInput",
    "DeleteCommunityInput",
    # Output models
    "CommunityOutput",
    "CommunityListOutput",
    "BrandingOutput",
    "DeleteOutput",
    # Ports
    "CommunityRepoPort",
    "MemberReaderPort",
    "TimePort",
]
