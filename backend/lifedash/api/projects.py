"""
Projects API

Endpoints for the caller's project list, project cards and routines.
"""
from fastapi import APIRouter, Depends, Query

from ..planning import Identity, ProfileRepository, ProjectRepository, ValidationFailed
from ..planning.editing import add_routine, delete_routine, edit_routine
from ..planning.progress import summarize_goal
from ..schemas.project import (
    Project,
    ProjectCreate,
    ProjectDetailResponse,
    ProjectListResponse,
    ProjectUpdate,
    RoutineInput,
)
from .deps import get_identity, get_profile_repository, get_project_repository

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    identity: Identity = Depends(get_identity),
    projects: ProjectRepository = Depends(get_project_repository),
):
    """List the caller's projects, newest first."""
    items = await projects.list(identity.uid)
    return ProjectListResponse(projects=items, total=len(items))


@router.post("", response_model=Project)
async def create_project(
    data: ProjectCreate,
    identity: Identity = Depends(get_identity),
    projects: ProjectRepository = Depends(get_project_repository),
    profiles: ProfileRepository = Depends(get_profile_repository),
):
    """
    Create a project.

    With ``isPrivate: false`` a shared project is created and the
    returned project is the caller's shortcut to it.
    """
    owner = None if data.is_private else await profiles.member_for(identity)
    return await projects.create(identity, data, owner)


@router.get("/{project_id}", response_model=ProjectDetailResponse)
async def get_project(
    project_id: str,
    identity: Identity = Depends(get_identity),
    projects: ProjectRepository = Depends(get_project_repository),
):
    """Get a project with per-goal progress."""
    project = await projects.get(identity.uid, project_id)
    return ProjectDetailResponse(
        project=project,
        goals=[summarize_goal(goal) for goal in project.goals],
    )


@router.patch("/{project_id}", response_model=Project)
async def update_project(
    project_id: str,
    data: ProjectUpdate,
    identity: Identity = Depends(get_identity),
    projects: ProjectRepository = Depends(get_project_repository),
):
    """Edit a project card."""
    return await projects.update(identity.uid, project_id, data)


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    confirm: bool = Query(False),
    identity: Identity = Depends(get_identity),
    projects: ProjectRepository = Depends(get_project_repository),
):
    """Delete a project from the list (requires confirm=true)."""
    await projects.delete(identity.uid, project_id, confirm)
    return {"status": "deleted", "project_id": project_id}


# -------------------------------------
# Routines
# -------------------------------------

async def _private_project(projects: ProjectRepository, uid: str, project_id: str) -> Project:
    project = await projects.get(uid, project_id)
    if project.is_shared:
        raise ValidationFailed("Routines belong to private projects only.")
    return project


@router.post("/{project_id}/routines", response_model=Project)
async def create_routine(
    project_id: str,
    data: RoutineInput,
    identity: Identity = Depends(get_identity),
    projects: ProjectRepository = Depends(get_project_repository),
):
    """Add a weekly routine."""
    project = await _private_project(projects, identity.uid, project_id)
    updated, _ = add_routine(project, data)
    return await projects.save(identity.uid, updated)


@router.patch("/{project_id}/routines/{routine_id}", response_model=Project)
async def update_routine(
    project_id: str,
    routine_id: str,
    data: RoutineInput,
    identity: Identity = Depends(get_identity),
    projects: ProjectRepository = Depends(get_project_repository),
):
    project = await _private_project(projects, identity.uid, project_id)
    return await projects.save(identity.uid, edit_routine(project, routine_id, data))


@router.delete("/{project_id}/routines/{routine_id}", response_model=Project)
async def remove_routine(
    project_id: str,
    routine_id: str,
    identity: Identity = Depends(get_identity),
    projects: ProjectRepository = Depends(get_project_repository),
):
    project = await _private_project(projects, identity.uid, project_id)
    return await projects.save(identity.uid, delete_routine(project, routine_id))
