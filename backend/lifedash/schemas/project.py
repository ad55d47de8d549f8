"""
Project Schemas

Pydantic models for private projects and their content (goals, tasks,
issues, routines), plus the project API requests and responses.

Persisted documents use camelCase field names; every model accepts
either spelling and serializes with the camelCase aliases.
"""
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


# Placeholder deadline meaning "unscheduled"; sorted last
NO_DEADLINE = "no deadline"

# Default assignee labels
UNASSIGNED = "unassigned"
SELF_ASSIGNEE = "me"

DOCUMENT_CONFIG = {
    "alias_generator": to_camel,
    "populate_by_name": True,
    "extra": "ignore",
}

REQUEST_CONFIG = {
    "alias_generator": to_camel,
    "populate_by_name": True,
    "extra": "forbid",
}


class IssueStatus(str, Enum):
    """Issue workflow states."""
    UNSTARTED = "unstarted"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class Task(BaseModel):
    """A unit of work inside a goal."""
    id: str
    title: str = ""
    done: bool = False
    deadline: str = NO_DEADLINE
    completed_at: Optional[str] = None
    assignee: str = UNASSIGNED

    model_config = DOCUMENT_CONFIG


class Goal(BaseModel):
    """A mid-level milestone grouping tasks."""
    id: str
    title: str = ""
    deadline: str = NO_DEADLINE
    tasks: List[Task] = []

    model_config = DOCUMENT_CONFIG


class Issue(BaseModel):
    """An entry on a project's issue list."""
    id: str
    title: str = ""
    description: str = ""
    status: IssueStatus = IssueStatus.UNSTARTED
    assignee: str = UNASSIGNED
    deadline: str = NO_DEADLINE
    related_goal: Optional[str] = None  # Goal id, resolved at read time

    model_config = DOCUMENT_CONFIG


class Routine(BaseModel):
    """A recurring weekly time commitment on a private project."""
    id: str
    title: str = ""
    target_hours_per_week: float = Field(0, ge=0)
    memo: Optional[str] = None

    model_config = DOCUMENT_CONFIG


class ProjectContent(BaseModel):
    """Fields shared by private and shared projects."""
    id: str
    title: str = ""
    description: str = ""
    goals: List[Goal] = []
    issues: List[Issue] = []
    progress: int = 0
    deadline: str = ""
    allocated_hours_per_week: float = 0
    created_at: Optional[str] = None

    model_config = DOCUMENT_CONFIG


class Project(ProjectContent):
    """
    A project in a user's private namespace.

    When ``is_shared`` is set the document is a shortcut pointing at a
    shared project; its goals stay empty and the shared document is the
    source of truth.
    """
    is_private: bool = True
    routines: List[Routine] = []
    is_shared: bool = False
    shared_project_id: Optional[str] = None
    owner_uid: Optional[str] = None


# ===========================================
# Requests
# ===========================================

class ProjectCreate(BaseModel):
    """Request to create a private or shared project."""
    title: str = Field(..., max_length=255)
    description: str = ""
    is_private: bool = True
    deadline: str = ""
    allocated_hours_per_week: float = Field(0, ge=0)

    model_config = REQUEST_CONFIG


class ProjectUpdate(BaseModel):
    """Request to edit a project card."""
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    is_private: Optional[bool] = None
    deadline: Optional[str] = None
    allocated_hours_per_week: Optional[float] = Field(None, ge=0)

    model_config = REQUEST_CONFIG


class GoalInput(BaseModel):
    """Request to add or edit a goal."""
    title: str = ""
    deadline: str = ""

    model_config = REQUEST_CONFIG


class TaskInput(BaseModel):
    """Request to add or edit a task."""
    title: str = ""
    deadline: str = ""
    assignee: str = ""
    completed_at: Optional[str] = None

    model_config = REQUEST_CONFIG


class TaskCompletion(BaseModel):
    """Request to mark a task done on a chosen date."""
    completed_at: str = ""

    model_config = REQUEST_CONFIG


class IssueInput(BaseModel):
    """Request to add an issue."""
    title: str = ""
    description: str = ""
    deadline: str = ""
    assignee: str = ""
    related_goal: str = ""

    model_config = REQUEST_CONFIG


class IssueUpdate(BaseModel):
    """Request to edit an issue."""
    title: Optional[str] = None
    description: Optional[str] = None
    deadline: Optional[str] = None
    assignee: Optional[str] = None
    related_goal: Optional[str] = None
    status: Optional[IssueStatus] = None

    model_config = REQUEST_CONFIG


class IssueStatusUpdate(BaseModel):
    """Request to move an issue to another status."""
    status: IssueStatus

    model_config = REQUEST_CONFIG


class RoutineInput(BaseModel):
    """Request to add or edit a routine."""
    title: str = ""
    target_hours_per_week: float = Field(0, ge=0)
    memo: Optional[str] = None

    model_config = REQUEST_CONFIG


# ===========================================
# Responses
# ===========================================

class GoalSummary(BaseModel):
    """Per-goal progress with tasks in deadline order."""
    goal_id: str
    title: str
    deadline: str
    done_tasks: int
    total_tasks: int
    progress: int
    tasks: List[Task] = []

    model_config = DOCUMENT_CONFIG


class IssueView(Issue):
    """Issue with its related goal resolved to a title."""
    related_goal_title: Optional[str] = None


class ProjectDetailResponse(BaseModel):
    """A project with derived goal summaries."""
    project: Project
    goals: List[GoalSummary] = []

    model_config = DOCUMENT_CONFIG


class ContentResponse(BaseModel):
    """Goals and issues of a private or shared project after an edit."""
    project_id: str
    progress: int
    goals: List[GoalSummary] = []
    issues: List[IssueView] = []

    model_config = DOCUMENT_CONFIG


class ProjectListResponse(BaseModel):
    """List of the caller's projects."""
    projects: List[Project]
    total: int


class IssueListResponse(BaseModel):
    """Issues of one project."""
    issues: List[IssueView]
    total: int
