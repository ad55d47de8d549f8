"""
Resources API

Weekly capacity setting and the allocation summary.
"""
from fastapi import APIRouter, Depends

from ..config import settings
from ..planning import CapacityRepository, Identity, ProjectRepository
from ..planning.resources import summarize_resources
from ..schemas.profile import CapacitySetting, CapacityUpdate, ResourceSummary
from .deps import get_capacity_repository, get_identity, get_project_repository

router = APIRouter(tags=["resources"])


@router.get("/resources", response_model=ResourceSummary)
async def get_resources(
    identity: Identity = Depends(get_identity),
    projects: ProjectRepository = Depends(get_project_repository),
    capacity: CapacityRepository = Depends(get_capacity_repository),
):
    """Allocated hours against weekly capacity."""
    weekly_capacity = await capacity.get(identity.uid)
    items = await projects.list(identity.uid)
    return summarize_resources(items, weekly_capacity, settings.utilization_cap)


@router.get("/settings/capacity", response_model=CapacitySetting)
async def get_capacity(
    identity: Identity = Depends(get_identity),
    capacity: CapacityRepository = Depends(get_capacity_repository),
):
    return CapacitySetting(weekly_capacity=await capacity.get(identity.uid))


@router.put("/settings/capacity", response_model=CapacitySetting)
async def update_capacity(
    data: CapacityUpdate,
    identity: Identity = Depends(get_identity),
    capacity: CapacityRepository = Depends(get_capacity_repository),
):
    """Change the weekly capacity; values <= 0 are stored as 1."""
    return CapacitySetting(weekly_capacity=await capacity.save(identity.uid, data.weekly_capacity))
