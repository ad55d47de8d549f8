"""
Project Content Editing

Goal, task, issue and routine mutations. Each function validates its
input, works on a deep copy and returns the updated project; the
caller's value is left as it was so a failed save changes nothing.
Persisting (and recomputing progress) is the repository's job.
"""
from datetime import date
from typing import List, Optional, Tuple, TypeVar
import uuid

from ..schemas.project import (
    Goal,
    GoalInput,
    Issue,
    IssueInput,
    IssueStatus,
    IssueUpdate,
    IssueView,
    Project,
    ProjectContent,
    Routine,
    RoutineInput,
    Task,
    TaskInput,
    NO_DEADLINE,
    SELF_ASSIGNEE,
    UNASSIGNED,
)
from .errors import NotFound, ValidationFailed

P = TypeVar("P", bound=ProjectContent)

# Label for an issue whose related goal no longer exists
DELETED_GOAL_LABEL = "(deleted)"


def new_item_id() -> str:
    """Id for a goal, task, issue or routine."""
    return uuid.uuid4().hex[:12]


def require_title(title: Optional[str], what: str = "Title") -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationFailed(f"{what} is required.")
    return cleaned


def parse_date(value: str, field: str) -> date:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationFailed(f"{field} must be a date in YYYY-MM-DD format.")


def clean_deadline(value: Optional[str]) -> str:
    """Empty input means unscheduled; anything else must be a real date."""
    if not value or value == NO_DEADLINE:
        return NO_DEADLINE
    parse_date(value, "Deadline")
    return value


def clean_project_deadline(value: Optional[str]) -> str:
    """Project deadlines stay empty when unset."""
    if not value:
        return ""
    parse_date(value, "Deadline")
    return value


def _goal(project: ProjectContent, goal_id: str) -> Goal:
    for goal in project.goals:
        if goal.id == goal_id:
            return goal
    raise NotFound(f"Goal {goal_id} does not exist.")


def _task(goal: Goal, task_id: str) -> Task:
    for task in goal.tasks:
        if task.id == task_id:
            return task
    raise NotFound(f"Task {task_id} does not exist.")


def _issue(project: ProjectContent, issue_id: str) -> Issue:
    for issue in project.issues:
        if issue.id == issue_id:
            return issue
    raise NotFound(f"Issue {issue_id} does not exist.")


def _routine(project: Project, routine_id: str) -> Routine:
    for routine in project.routines:
        if routine.id == routine_id:
            return routine
    raise NotFound(f"Routine {routine_id} does not exist.")


# -------------------------------------
# Goals
# -------------------------------------

def add_goal(project: P, data: GoalInput) -> Tuple[P, Goal]:
    goal = Goal(
        id=new_item_id(),
        title=require_title(data.title),
        deadline=clean_deadline(data.deadline),
        tasks=[],
    )
    updated = project.model_copy(deep=True)
    updated.goals.append(goal)
    return updated, goal


def edit_goal(project: P, goal_id: str, data: GoalInput) -> P:
    title = require_title(data.title)
    deadline = clean_deadline(data.deadline)
    updated = project.model_copy(deep=True)
    goal = _goal(updated, goal_id)
    goal.title = title
    goal.deadline = deadline
    return updated


def delete_goal(project: P, goal_id: str) -> P:
    """Remove a goal with all its tasks. Issues keep their soft reference."""
    _goal(project, goal_id)
    updated = project.model_copy(deep=True)
    updated.goals = [g for g in updated.goals if g.id != goal_id]
    return updated


# -------------------------------------
# Tasks
# -------------------------------------

def add_task(project: P, goal_id: str, data: TaskInput) -> Tuple[P, Task]:
    task = Task(
        id=new_item_id(),
        title=require_title(data.title),
        done=False,
        deadline=clean_deadline(data.deadline),
        assignee=data.assignee or UNASSIGNED,
    )
    updated = project.model_copy(deep=True)
    _goal(updated, goal_id).tasks.append(task)
    return updated, task


def edit_task(project: P, goal_id: str, task_id: str, data: TaskInput) -> P:
    """
    Edit a task's title, deadline and assignee.

    A completion date is only taken for tasks that are already done, so
    ``completed_at`` stays set exactly when ``done`` is.
    """
    title = require_title(data.title)
    deadline = clean_deadline(data.deadline)
    if data.completed_at:
        parse_date(data.completed_at, "Completion date")

    updated = project.model_copy(deep=True)
    task = _task(_goal(updated, goal_id), task_id)
    task.title = title
    task.deadline = deadline
    task.assignee = data.assignee or UNASSIGNED
    if task.done and data.completed_at:
        task.completed_at = data.completed_at
    return updated


def toggle_task(project: P, goal_id: str, task_id: str, today: Optional[date] = None) -> P:
    """Flip ``done``; completing stamps today's date, reopening clears it."""
    updated = project.model_copy(deep=True)
    task = _task(_goal(updated, goal_id), task_id)
    if task.done:
        task.done = False
        task.completed_at = None
    else:
        task.done = True
        task.completed_at = (today or date.today()).isoformat()
    return updated


def complete_task(project: P, goal_id: str, task_id: str, completed_at: str) -> P:
    """Mark a task done on an explicitly chosen date."""
    if not completed_at:
        raise ValidationFailed("Completion date is required.")
    parse_date(completed_at, "Completion date")

    updated = project.model_copy(deep=True)
    task = _task(_goal(updated, goal_id), task_id)
    task.done = True
    task.completed_at = completed_at
    return updated


def delete_task(project: P, goal_id: str, task_id: str) -> P:
    _task(_goal(project, goal_id), task_id)
    updated = project.model_copy(deep=True)
    goal = _goal(updated, goal_id)
    goal.tasks = [t for t in goal.tasks if t.id != task_id]
    return updated


# -------------------------------------
# Issues
# -------------------------------------

def _clean_related_goal(project: ProjectContent, goal_id: Optional[str]) -> Optional[str]:
    if not goal_id:
        return None
    if not any(g.id == goal_id for g in project.goals):
        raise ValidationFailed(f"Related goal {goal_id} does not exist.")
    return goal_id


def add_issue(project: P, data: IssueInput, private: bool) -> Tuple[P, Issue]:
    """New issues start unstarted; on private projects they belong to the owner."""
    issue = Issue(
        id=new_item_id(),
        title=require_title(data.title),
        description=data.description,
        status=IssueStatus.UNSTARTED,
        assignee=SELF_ASSIGNEE if private else (data.assignee or UNASSIGNED),
        deadline=clean_deadline(data.deadline),
        related_goal=_clean_related_goal(project, data.related_goal),
    )
    updated = project.model_copy(deep=True)
    updated.issues.append(issue)
    return updated, issue


def edit_issue(project: P, issue_id: str, data: IssueUpdate) -> P:
    changes = data.model_dump(exclude_unset=True)
    if "title" in changes:
        changes["title"] = require_title(changes["title"])
    if "deadline" in changes:
        changes["deadline"] = clean_deadline(changes["deadline"])
    if "assignee" in changes:
        changes["assignee"] = changes["assignee"] or UNASSIGNED
    if "related_goal" in changes:
        changes["related_goal"] = _clean_related_goal(project, changes["related_goal"])
    if changes.get("description") is None:
        changes.pop("description", None)
    if changes.get("status") is None:
        changes.pop("status", None)

    updated = project.model_copy(deep=True)
    issue = _issue(updated, issue_id)
    for field, value in changes.items():
        setattr(issue, field, value)
    return updated


def set_issue_status(project: P, issue_id: str, status: IssueStatus) -> P:
    updated = project.model_copy(deep=True)
    _issue(updated, issue_id).status = status
    return updated


def delete_issue(project: P, issue_id: str) -> P:
    _issue(project, issue_id)
    updated = project.model_copy(deep=True)
    updated.issues = [i for i in updated.issues if i.id != issue_id]
    return updated


def related_goal_title(project: ProjectContent, issue: Issue) -> Optional[str]:
    """Title of the issue's related goal, a placeholder when it was deleted."""
    if not issue.related_goal:
        return None
    for goal in project.goals:
        if goal.id == issue.related_goal:
            return goal.title
    return DELETED_GOAL_LABEL


def issue_views(project: ProjectContent) -> List[IssueView]:
    return [
        IssueView(**issue.model_dump(), related_goal_title=related_goal_title(project, issue))
        for issue in project.issues
    ]


# -------------------------------------
# Routines (private projects only)
# -------------------------------------

def add_routine(project: Project, data: RoutineInput) -> Tuple[Project, Routine]:
    routine = Routine(
        id=new_item_id(),
        title=require_title(data.title),
        target_hours_per_week=data.target_hours_per_week,
        memo=data.memo or None,
    )
    updated = project.model_copy(deep=True)
    updated.routines.append(routine)
    return updated, routine


def edit_routine(project: Project, routine_id: str, data: RoutineInput) -> Project:
    title = require_title(data.title)
    updated = project.model_copy(deep=True)
    routine = _routine(updated, routine_id)
    routine.title = title
    routine.target_hours_per_week = data.target_hours_per_week
    routine.memo = data.memo or None
    return updated


def delete_routine(project: Project, routine_id: str) -> Project:
    _routine(project, routine_id)
    updated = project.model_copy(deep=True)
    updated.routines = [r for r in updated.routines if r.id != routine_id]
    return updated


def routine_hours(project: Project) -> float:
    """Total weekly hours of a project's routines."""
    return sum(r.target_hours_per_week for r in project.routines)
