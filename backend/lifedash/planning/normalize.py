"""
Document Normalization

Maps untyped documents read from the store into canonical entities.
Every optional field gets an explicit default, and values written by
older versions of the app (legacy statuses, the old "no deadline"
placeholder, members with only a ``name``) are translated.
"""
import logging
from typing import Any, Dict, List, Optional

from ..schemas.project import (
    Goal,
    Issue,
    IssueStatus,
    Project,
    Routine,
    Task,
    NO_DEADLINE,
    UNASSIGNED,
)
from ..schemas.shared import Member, SharedProject

logger = logging.getLogger(__name__)

LEGACY_NO_DEADLINE = "期日なし"

LEGACY_ISSUE_STATUSES = {
    "未対応": IssueStatus.UNSTARTED,
    "対応中": IssueStatus.IN_PROGRESS,
    "完了": IssueStatus.DONE,
}


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return value if isinstance(value, str) else str(value)


def _hours(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value if value >= 0 else 0


def _records(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _strings(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item]


def normalize_deadline(value: Any) -> str:
    """Goal/task/issue deadline; empty or legacy placeholders become NO_DEADLINE."""
    text = _text(value)
    if not text or text == LEGACY_NO_DEADLINE:
        return NO_DEADLINE
    return text


def normalize_issue_status(value: Any) -> IssueStatus:
    if isinstance(value, str):
        if value in LEGACY_ISSUE_STATUSES:
            return LEGACY_ISSUE_STATUSES[value]
        try:
            return IssueStatus(value)
        except ValueError:
            pass
    logger.debug(f"Unknown issue status {value!r}, treating as unstarted")
    return IssueStatus.UNSTARTED


def normalize_task(raw: Dict[str, Any], fallback_id: str) -> Task:
    done = bool(raw.get("done", False))
    completed_at = raw.get("completedAt") or None
    return Task(
        id=_text(raw.get("id")) or fallback_id,
        title=_text(raw.get("title")),
        done=done,
        deadline=normalize_deadline(raw.get("deadline")),
        completed_at=_text(completed_at) if completed_at else None,
        assignee=_text(raw.get("assignee")) or UNASSIGNED,
    )


def normalize_goal(raw: Dict[str, Any], fallback_id: str) -> Goal:
    goal_id = _text(raw.get("id")) or fallback_id
    return Goal(
        id=goal_id,
        title=_text(raw.get("title")),
        deadline=normalize_deadline(raw.get("deadline")),
        tasks=[
            normalize_task(task, f"{goal_id}-task-{index}")
            for index, task in enumerate(_records(raw.get("tasks")))
        ],
    )


def normalize_issue(raw: Dict[str, Any], fallback_id: str) -> Issue:
    return Issue(
        id=_text(raw.get("id")) or fallback_id,
        title=_text(raw.get("title")),
        description=_text(raw.get("description")),
        status=normalize_issue_status(raw.get("status")),
        assignee=_text(raw.get("assignee")) or UNASSIGNED,
        deadline=normalize_deadline(raw.get("deadline")),
        related_goal=_text(raw.get("relatedGoal")) or None,
    )


def normalize_routine(raw: Dict[str, Any], fallback_id: str) -> Routine:
    memo = raw.get("memo")
    return Routine(
        id=_text(raw.get("id")) or fallback_id,
        title=_text(raw.get("title")),
        target_hours_per_week=_hours(raw.get("targetHoursPerWeek")),
        memo=_text(memo) if memo else None,
    )


def normalize_member(raw: Dict[str, Any]) -> Optional[Member]:
    member_id = _text(raw.get("id"))
    if not member_id:
        return None
    name = _text(raw.get("name")) or None
    nickname = _text(raw.get("nickname")) or name
    return Member(
        id=member_id,
        nickname=nickname,
        name=name,
        avatar_url=_text(raw.get("avatarUrl")) or None,
    )


def _content_fields(doc_id: str, raw: Dict[str, Any]) -> Dict[str, Any]:
    progress = raw.get("progress")
    return {
        "id": doc_id,
        "title": _text(raw.get("title")),
        "description": _text(raw.get("description")),
        "goals": [
            normalize_goal(goal, f"goal-{index}")
            for index, goal in enumerate(_records(raw.get("goals")))
        ],
        "issues": [
            normalize_issue(issue, f"issue-{index}")
            for index, issue in enumerate(_records(raw.get("issues")))
        ],
        "progress": progress if isinstance(progress, int) and 0 <= progress <= 100 else 0,
        "deadline": _text(raw.get("deadline")),
        "allocated_hours_per_week": _hours(raw.get("allocatedHoursPerWeek")),
        "created_at": _text(raw.get("createdAt")) or None,
    }


def normalize_project(doc_id: str, raw: Dict[str, Any]) -> Project:
    """Map a private-namespace document into a Project."""
    is_shared = bool(raw.get("isShared", False))
    return Project(
        **_content_fields(doc_id, raw),
        is_private=bool(raw.get("isPrivate", True)) and not is_shared,
        routines=[
            normalize_routine(routine, f"routine-{index}")
            for index, routine in enumerate(_records(raw.get("routines")))
        ],
        is_shared=is_shared,
        shared_project_id=_text(raw.get("sharedProjectId")) or None,
        owner_uid=_text(raw.get("ownerUid")) or None,
    )


def normalize_shared_project(doc_id: str, raw: Dict[str, Any]) -> SharedProject:
    """Map a shared-namespace document into a SharedProject."""
    members = [normalize_member(m) for m in _records(raw.get("members"))]
    return SharedProject(
        **_content_fields(doc_id, raw),
        is_private=False,
        owner_uid=_text(raw.get("ownerUid")),
        members=[m for m in members if m is not None],
        member_uids=_strings(raw.get("memberUids")),
        member_emails=_strings(raw.get("memberEmails")),
    )
