"""
Calendar Schemas

Pydantic models for the deadline calendar.
"""
from enum import Enum
from typing import Dict, Optional, List
from pydantic import BaseModel

from .project import DOCUMENT_CONFIG


class CalendarItemType(str, Enum):
    """Kinds of calendar entries."""
    PROJECT = "project"
    TASK = "task"


class CalendarItem(BaseModel):
    """One deadline on the calendar."""
    id: str
    type: CalendarItemType
    title: str
    deadline: str
    project_id: str
    project_title: str
    assignee: Optional[str] = None
    done: Optional[bool] = None

    model_config = DOCUMENT_CONFIG


class CalendarCounts(BaseModel):
    """Per-date tallies for a month view."""
    project_count: int = 0
    task_count: int = 0

    model_config = DOCUMENT_CONFIG


class CalendarResponse(BaseModel):
    """Every deadline keyed by date string."""
    items_by_date: Dict[str, List[CalendarItem]]
    counts: Dict[str, CalendarCounts]

    model_config = DOCUMENT_CONFIG


class CalendarDayResponse(BaseModel):
    """Deadlines falling on a single date."""
    date: str
    items: List[CalendarItem] = []

    model_config = DOCUMENT_CONFIG
