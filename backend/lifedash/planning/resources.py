"""
Resource Allocation

Weekly capacity against the hours allocated to projects. Derived on
every read; only the capacity setting itself is stored.
"""
from typing import Iterable

from ..schemas.profile import LoadLevel, ProjectAllocation, ResourceSummary
from ..schemas.project import Project
from .editing import routine_hours

COMFORTABLE_THRESHOLD = 0.8
FULL_THRESHOLD = 1.0


def utilization(total_allocated: float, weekly_capacity: float, cap: float = 2.0) -> float:
    """Allocated / capacity, capped for display; 0 when capacity is 0."""
    if weekly_capacity <= 0:
        return 0
    return min(total_allocated / weekly_capacity, cap)


def load_level(ratio: float) -> LoadLevel:
    if ratio <= COMFORTABLE_THRESHOLD:
        return LoadLevel.COMFORTABLE
    if ratio <= FULL_THRESHOLD:
        return LoadLevel.FULL
    return LoadLevel.OVERLOADED


def summarize_resources(
    projects: Iterable[Project],
    weekly_capacity: float,
    cap: float = 2.0,
) -> ResourceSummary:
    projects = list(projects)
    total = sum(p.allocated_hours_per_week for p in projects)
    ratio = utilization(total, weekly_capacity, cap)
    percent = int(total / weekly_capacity * 100 + 0.5) if weekly_capacity > 0 else 0

    return ResourceSummary(
        total_allocated=total,
        weekly_capacity=weekly_capacity,
        utilization=ratio,
        utilization_percent=percent,
        load_level=load_level(ratio),
        projects=[
            ProjectAllocation(
                project_id=p.id,
                title=p.title,
                allocated_hours_per_week=p.allocated_hours_per_week,
                routine_hours_per_week=routine_hours(p),
            )
            for p in projects
        ],
    )
