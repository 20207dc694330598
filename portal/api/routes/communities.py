from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, status

from portal.api.deps import (
    get_clock,
    get_community_repo,
    get_identity,
    get_member_repo,
    get_policy,
)
from portal.api.errors import http_error
from portal.api.schemas import (
    BrandingResponse,
    CommunityCreateRequest,
    CommunityResponse,
    CommunityUpdateRequest,
    SuccessResponse,
)
from portal.components.community import (
    CreateCommunityInput,
    DeleteCommunityInput,
    GetBrandingInput,
    ListCommunitiesInput,
    UpdateCommunityInput,
    run_create,
    run_delete,
    run_get_branding,
    run_list,
    run_update,
)

router = APIRouter()


@router.get("", response_model=list[CommunityResponse])
def list_communities(
    identity: UUID | None = Depends(get_identity),
    community_repo: Any = Depends(get_community_repo),
    member_repo: Any = Depends(get_member_repo),
    policy: Any = Depends(get_policy),
) -> list[CommunityResponse]:
    """Superadmin sees every community, an admin sees its own."""
    result = run_list(
        ListCommunitiesInput(requester=identity),
        community_repo=community_repo,
        member_repo=member_repo,
        policy=policy,
    )

    if not result.success:
        raise http_error(result.error_code, result.error)

    return [CommunityResponse.model_validate(c) for c in result.communities]


@router.post("", response_model=CommunityResponse, status_code=status.HTTP_201_CREATED)
def create_community(
    req: CommunityCreateRequest,
    identity: UUID | None = Depends(get_identity),
    community_repo: Any = Depends(get_community_repo),
    member_repo: Any = Depends(get_member_repo),
    policy: Any = Depends(get_policy),
    clock: Any = Depends(get_clock),
) -> CommunityResponse:
    inp = CreateCommunityInput(
        requester=identity,
        name=req.name,
        logo_url=req.logo_url,
        favicon_url=req.favicon_url,
    )
    result = run_create(
        inp,
        community_repo=community_repo,
        member_repo=member_repo,
        policy=policy,
        time=clock,
    )

    if not result.success:
        raise http_error(result.error_code, result.error)

    return CommunityResponse.model_validate(result.community)


@router.get("/{community_id}/branding", response_model=BrandingResponse)
def get_branding(
    community_id: UUID,
    community_repo: Any = Depends(get_community_repo),
) -> BrandingResponse:
    """Public: name, logo and favicon for theming."""
    result = run_get_branding(
        GetBrandingInput(community_id=community_id), community_repo=community_repo
    )

    if not result.success or result.name is None:
        raise http_error(result.error_code, result.error)

    return BrandingResponse(
        name=result.name, logo_url=result.logo_url, favicon_url=result.favicon_url
    )


@router.patch("/{community_id}", response_model=CommunityResponse)
def update_community(
    community_id: UUID,
    req: CommunityUpdateRequest,
    identity: UUID | None = Depends(get_identity),
    community_repo: Any = Depends(get_community_repo),
    member_repo: Any = Depends(get_member_repo),
    policy: Any = Depends(get_policy),
    clock: Any = Depends(get_clock),
) -> CommunityResponse:
    inp = UpdateCommunityInput(
        requester=identity,
        community_id=community_id,
        name=req.name,
        logo_url=req.logo_url,
        favicon_url=req.favicon_url,
    )
    result = run_update(
        inp,
        community_repo=community_repo,
        member_repo=member_repo,
        policy=policy,
        time=clock,
    )

    if not result.success:
        raise http_error(result.error_code, result.error)

    return CommunityResponse.model_validate(result.community)


@router.delete("/{community_id}", response_model=SuccessResponse)
def delete_community(
    community_id: UUID,
    identity: UUID | None = Depends(get_identity),
    community_repo: Any = Depends(get_community_repo),
    member_repo: Any = Depends(get_member_repo),
    policy: Any = Depends(get_policy),
) -> SuccessResponse:
    result = run_delete(
        DeleteCommunityInput(requester=identity, community_id=community_id),
        community_repo=community_repo,
        member_repo=member_repo,
        policy=policy,
    )

    if not result.success:
        raise http_error(result.error_code, result.error)

    return SuccessResponse(success=True)
