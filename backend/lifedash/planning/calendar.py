"""
Calendar Aggregation

Turns a user's projects into a date-keyed list of deadlines. Project
deadlines and task deadlines appear; goal deadlines never do.
"""
from typing import Dict, Iterable, List

from ..schemas.calendar import CalendarCounts, CalendarItem, CalendarItemType
from ..schemas.project import ProjectContent, NO_DEADLINE


def _has_deadline(value: str) -> bool:
    return bool(value) and value != NO_DEADLINE


def build_calendar(projects: Iterable[ProjectContent]) -> Dict[str, List[CalendarItem]]:
    """
    Map each deadline date to its calendar items.

    Items accumulate per date in the order projects and tasks are
    visited; nothing is deduplicated or merged across dates.
    """
    items_by_date: Dict[str, List[CalendarItem]] = {}

    for project in projects:
        if _has_deadline(project.deadline):
            items_by_date.setdefault(project.deadline, []).append(CalendarItem(
                id=f"project-{project.id}",
                type=CalendarItemType.PROJECT,
                title=f"Project deadline: {project.title}",
                deadline=project.deadline,
                project_id=project.id,
                project_title=project.title,
            ))

        for goal in project.goals:
            for task in goal.tasks:
                if not _has_deadline(task.deadline):
                    continue
                items_by_date.setdefault(task.deadline, []).append(CalendarItem(
                    id=f"task-{task.id}",
                    type=CalendarItemType.TASK,
                    title=task.title,
                    deadline=task.deadline,
                    project_id=project.id,
                    project_title=project.title,
                    assignee=task.assignee,
                    done=task.done,
                ))

    return items_by_date


def count_by_date(items_by_date: Dict[str, List[CalendarItem]]) -> Dict[str, CalendarCounts]:
    """Project and task tallies per date, for month-view badges."""
    counts = {}
    for day, items in items_by_date.items():
        counts[day] = CalendarCounts(
            project_count=sum(1 for i in items if i.type == CalendarItemType.PROJECT),
            task_count=sum(1 for i in items if i.type == CalendarItemType.TASK),
        )
    return counts
