"""
Progress Calculation

Completion percentages derived from task state. ``progress`` is never
edited by hand; it is recomputed from the goals on every save.
"""
from datetime import date
from typing import Iterable, List, Tuple

from ..schemas.project import Goal, GoalSummary, Task, NO_DEADLINE


def _percent(done: int, total: int) -> int:
    if total == 0:
        return 0
    # Half-up, in integers: 1 of 8 done is 13, not round()'s 12
    return (200 * done + total) // (2 * total)


def count_tasks(goals: Iterable[Goal]) -> Tuple[int, int]:
    """Return (done, total) over every task of every goal."""
    done = 0
    total = 0
    for goal in goals:
        for task in goal.tasks:
            total += 1
            if task.done:
                done += 1
    return done, total


def calculate_progress(goals: Iterable[Goal]) -> int:
    """Percentage of done tasks across all goals, 0 when there are none."""
    done, total = count_tasks(goals)
    return _percent(done, total)


def _deadline_key(task: Task) -> Tuple[int, date]:
    if not task.deadline or task.deadline == NO_DEADLINE:
        return (1, date.max)
    try:
        return (0, date.fromisoformat(task.deadline))
    except ValueError:
        return (1, date.max)


def sort_tasks_by_deadline(tasks: Iterable[Task]) -> List[Task]:
    """Earliest deadline first; unscheduled or unparsable deadlines last."""
    return sorted(tasks, key=_deadline_key)


def summarize_goal(goal: Goal) -> GoalSummary:
    """Done/total counts for one goal, tasks in deadline order."""
    done, total = count_tasks([goal])
    return GoalSummary(
        goal_id=goal.id,
        title=goal.title,
        deadline=goal.deadline or NO_DEADLINE,
        done_tasks=done,
        total_tasks=total,
        progress=_percent(done, total),
        tasks=sort_tasks_by_deadline(goal.tasks),
    )
