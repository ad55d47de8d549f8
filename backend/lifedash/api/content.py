"""
Project Content API

Goal, task and issue editing. The same routes serve private projects
(``/projects/...``) and shared projects (``/shared/...``); shared
projects can only be edited by their members.
"""
from enum import Enum
from typing import Union

from fastapi import APIRouter, Depends

from ..planning import Identity, ProjectRepository, SharedProjectRepository, ValidationFailed
from ..planning import editing
from ..planning.progress import summarize_goal
from ..planning.shared import require_member
from ..schemas.project import (
    ContentResponse,
    GoalInput,
    IssueInput,
    IssueListResponse,
    IssueStatusUpdate,
    IssueUpdate,
    Project,
    TaskCompletion,
    TaskInput,
)
from ..schemas.shared import SharedProject
from .deps import get_identity, get_project_repository, get_shared_repository

router = APIRouter(prefix="/{scope}/{project_id}", tags=["content"])


class ProjectScope(str, Enum):
    """Which namespace a project id refers to."""
    PROJECTS = "projects"
    SHARED = "shared"


AnyProject = Union[Project, SharedProject]


class ContentTarget:
    """Loads and saves the project a content route operates on."""

    def __init__(
        self,
        scope: ProjectScope,
        identity: Identity = Depends(get_identity),
        projects: ProjectRepository = Depends(get_project_repository),
        shared: SharedProjectRepository = Depends(get_shared_repository),
    ):
        self.scope = scope
        self.identity = identity
        self.projects = projects
        self.shared = shared

    @property
    def private(self) -> bool:
        return self.scope == ProjectScope.PROJECTS

    async def load(self, project_id: str) -> AnyProject:
        if self.private:
            project = await self.projects.get(self.identity.uid, project_id)
            if project.is_shared:
                raise ValidationFailed("This project is shared; edit it from the shared project.")
            return project

        project = await self.shared.get(project_id)
        require_member(project, self.identity.uid)
        return project

    async def save(self, project: AnyProject) -> ContentResponse:
        if self.private:
            saved = await self.projects.save(self.identity.uid, project)
        else:
            saved = await self.shared.save(project)
        return content_response(saved)


def content_response(project: AnyProject) -> ContentResponse:
    return ContentResponse(
        project_id=project.id,
        progress=project.progress,
        goals=[summarize_goal(goal) for goal in project.goals],
        issues=editing.issue_views(project),
    )


# -------------------------------------
# Goals
# -------------------------------------

@router.post("/goals", response_model=ContentResponse)
async def create_goal(project_id: str, data: GoalInput, target: ContentTarget = Depends()):
    """Add a goal."""
    project = await target.load(project_id)
    updated, _ = editing.add_goal(project, data)
    return await target.save(updated)


@router.patch("/goals/{goal_id}", response_model=ContentResponse)
async def update_goal(project_id: str, goal_id: str, data: GoalInput, target: ContentTarget = Depends()):
    project = await target.load(project_id)
    return await target.save(editing.edit_goal(project, goal_id, data))


@router.delete("/goals/{goal_id}", response_model=ContentResponse)
async def remove_goal(project_id: str, goal_id: str, target: ContentTarget = Depends()):
    """Delete a goal and all of its tasks."""
    project = await target.load(project_id)
    return await target.save(editing.delete_goal(project, goal_id))


# -------------------------------------
# Tasks
# -------------------------------------

@router.post("/goals/{goal_id}/tasks", response_model=ContentResponse)
async def create_task(project_id: str, goal_id: str, data: TaskInput, target: ContentTarget = Depends()):
    project = await target.load(project_id)
    updated, _ = editing.add_task(project, goal_id, data)
    return await target.save(updated)


@router.patch("/goals/{goal_id}/tasks/{task_id}", response_model=ContentResponse)
async def update_task(
    project_id: str,
    goal_id: str,
    task_id: str,
    data: TaskInput,
    target: ContentTarget = Depends(),
):
    project = await target.load(project_id)
    return await target.save(editing.edit_task(project, goal_id, task_id, data))


@router.delete("/goals/{goal_id}/tasks/{task_id}", response_model=ContentResponse)
async def remove_task(project_id: str, goal_id: str, task_id: str, target: ContentTarget = Depends()):
    project = await target.load(project_id)
    return await target.save(editing.delete_task(project, goal_id, task_id))


@router.post("/goals/{goal_id}/tasks/{task_id}/toggle", response_model=ContentResponse)
async def toggle_task(project_id: str, goal_id: str, task_id: str, target: ContentTarget = Depends()):
    """Flip a task between done and not done."""
    project = await target.load(project_id)
    return await target.save(editing.toggle_task(project, goal_id, task_id))


@router.post("/goals/{goal_id}/tasks/{task_id}/complete", response_model=ContentResponse)
async def complete_task(
    project_id: str,
    goal_id: str,
    task_id: str,
    data: TaskCompletion,
    target: ContentTarget = Depends(),
):
    """Mark a task done on a chosen date."""
    project = await target.load(project_id)
    return await target.save(editing.complete_task(project, goal_id, task_id, data.completed_at))


# -------------------------------------
# Issues
# -------------------------------------

@router.get("/issues", response_model=IssueListResponse)
async def list_issues(project_id: str, target: ContentTarget = Depends()):
    """List issues with their related goal titles."""
    project = await target.load(project_id)
    views = editing.issue_views(project)
    return IssueListResponse(issues=views, total=len(views))


@router.post("/issues", response_model=ContentResponse)
async def create_issue(project_id: str, data: IssueInput, target: ContentTarget = Depends()):
    project = await target.load(project_id)
    updated, _ = editing.add_issue(project, data, private=target.private)
    return await target.save(updated)


@router.patch("/issues/{issue_id}", response_model=ContentResponse)
async def update_issue(project_id: str, issue_id: str, data: IssueUpdate, target: ContentTarget = Depends()):
    project = await target.load(project_id)
    return await target.save(editing.edit_issue(project, issue_id, data))


@router.put("/issues/{issue_id}/status", response_model=ContentResponse)
async def update_issue_status(
    project_id: str,
    issue_id: str,
    data: IssueStatusUpdate,
    target: ContentTarget = Depends(),
):
    project = await target.load(project_id)
    return await target.save(editing.set_issue_status(project, issue_id, data.status))


@router.delete("/issues/{issue_id}", response_model=ContentResponse)
async def remove_issue(project_id: str, issue_id: str, target: ContentTarget = Depends()):
    project = await target.load(project_id)
    return await target.save(editing.delete_issue(project, issue_id))
