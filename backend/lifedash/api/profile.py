"""
Profile API

The caller's profile, display-name preference and avatar. Every change
to how the caller is shown is pushed into the shared projects they
belong to.
"""
from fastapi import APIRouter, Depends, HTTPException, Request

from ..planning import Identity, ProfileRepository, SharedProjectRepository
from ..schemas.profile import (
    AvatarResponse,
    DisplayNameResponse,
    DisplayNameUpdate,
    ProfileResponse,
    ProfileSaveResponse,
    ProfileUpdate,
)
from .deps import get_identity, get_profile_repository, get_shared_repository

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
async def get_profile(
    identity: Identity = Depends(get_identity),
    profiles: ProfileRepository = Depends(get_profile_repository),
):
    return await profiles.view(identity)


@router.put("", response_model=ProfileSaveResponse)
async def save_profile(
    data: ProfileUpdate,
    identity: Identity = Depends(get_identity),
    profiles: ProfileRepository = Depends(get_profile_repository),
    shared: SharedProjectRepository = Depends(get_shared_repository),
):
    """Save nickname and photo URL, then update the caller's member records."""
    if not data.nickname.strip():
        raise HTTPException(status_code=400, detail="Nickname is required.")

    profile = await profiles.save(identity, data)
    nickname = await profiles.nickname_for(identity)
    if data.photo_url is not None:
        synced = await shared.sync_profile(identity.uid, nickname, data.photo_url)
    else:
        synced = await shared.sync_profile(identity.uid, nickname)
    return ProfileSaveResponse(profile=profile, synced_projects=synced)


@router.put("/display-name", response_model=DisplayNameResponse)
async def set_display_name(
    data: DisplayNameUpdate,
    identity: Identity = Depends(get_identity),
    profiles: ProfileRepository = Depends(get_profile_repository),
    shared: SharedProjectRepository = Depends(get_shared_repository),
):
    """Change the display name shown to other members."""
    display_name = await profiles.set_display_name(identity.uid, data.display_name)
    synced = await shared.sync_profile(identity.uid, await profiles.nickname_for(identity))
    return DisplayNameResponse(display_name=display_name, synced_projects=synced)


@router.put("/avatar", response_model=AvatarResponse)
async def upload_avatar(
    request: Request,
    identity: Identity = Depends(get_identity),
    profiles: ProfileRepository = Depends(get_profile_repository),
    shared: SharedProjectRepository = Depends(get_shared_repository),
):
    """Upload an avatar image sent as the raw request body."""
    data = await request.body()
    if not data:
        raise HTTPException(status_code=400, detail="Image data is required.")

    url = await profiles.upload_avatar(identity.uid, data)
    await shared.sync_profile(identity.uid, await profiles.nickname_for(identity), url)
    return AvatarResponse(photo_url=url)


@router.delete("/avatar", response_model=AvatarResponse)
async def delete_avatar(
    identity: Identity = Depends(get_identity),
    profiles: ProfileRepository = Depends(get_profile_repository),
    shared: SharedProjectRepository = Depends(get_shared_repository),
):
    await profiles.delete_avatar(identity.uid)
    await shared.sync_profile(identity.uid, await profiles.nickname_for(identity), None)
    return AvatarResponse(photo_url="")
