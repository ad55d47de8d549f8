"""
Shared Projects API

Viewing, joining and leaving shared projects, plus the share link.
"""
from fastapi import APIRouter, Depends, Query

from ..config import settings
from ..planning import Identity, ProfileRepository, SharedProjectRepository
from ..planning.shared import require_member
from ..schemas.shared import (
    JoinResponse,
    LeavePlan,
    LeaveRequest,
    LeaveResponse,
    SharedProjectView,
    ShareLinkResponse,
)
from .deps import get_identity, get_profile_repository, get_shared_repository

router = APIRouter(prefix="/shared", tags=["shared"])


@router.get("/{project_id}", response_model=SharedProjectView)
async def get_shared_project(
    project_id: str,
    identity: Identity = Depends(get_identity),
    shared: SharedProjectRepository = Depends(get_shared_repository),
):
    """
    Get a shared project as the caller sees it.

    Non-members get ``joinRequired: true`` and no edit rights; joining
    is an explicit POST to ``/join``.
    """
    project = await shared.get(project_id)
    return shared.view(project, identity.uid)


@router.post("/{project_id}/join", response_model=JoinResponse)
async def join_shared_project(
    project_id: str,
    identity: Identity = Depends(get_identity),
    shared: SharedProjectRepository = Depends(get_shared_repository),
    profiles: ProfileRepository = Depends(get_profile_repository),
):
    """Join as a member. Joining twice changes nothing."""
    member = await profiles.member_for(identity)
    return await shared.join(project_id, identity, member)


@router.get("/{project_id}/leave", response_model=LeavePlan)
async def plan_leave(
    project_id: str,
    identity: Identity = Depends(get_identity),
    shared: SharedProjectRepository = Depends(get_shared_repository),
):
    """Describe what leaving would do, for the confirmation prompt."""
    return await shared.plan_leave(project_id, identity.uid)


@router.post("/{project_id}/leave", response_model=LeaveResponse)
async def leave_shared_project(
    project_id: str,
    data: LeaveRequest,
    identity: Identity = Depends(get_identity),
    shared: SharedProjectRepository = Depends(get_shared_repository),
):
    """
    Leave the shared project.

    The owner must pass ``newOwnerUid`` when other members remain; the
    last member leaving deletes the project.
    """
    return await shared.leave(project_id, identity, data)


@router.delete("/{project_id}")
async def delete_shared_project(
    project_id: str,
    confirm: bool = Query(False),
    identity: Identity = Depends(get_identity),
    shared: SharedProjectRepository = Depends(get_shared_repository),
):
    """Delete the shared project for everyone (owner only, requires confirm=true)."""
    removed = await shared.delete(project_id, identity.uid, confirm)
    return {"status": "deleted", "project_id": project_id, "shortcuts_removed": removed}


@router.get("/{project_id}/share-link", response_model=ShareLinkResponse)
async def get_share_link(
    project_id: str,
    identity: Identity = Depends(get_identity),
    shared: SharedProjectRepository = Depends(get_shared_repository),
):
    """Link that opens the join prompt for whoever follows it."""
    project = await shared.get(project_id)
    require_member(project, identity.uid)
    return ShareLinkResponse(shared_project_id=project.id, url=settings.share_url(project.id))
