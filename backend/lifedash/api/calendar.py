"""
Calendar API

Project and task deadlines across the caller's projects.
"""
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query

from ..planning import Identity, ProjectRepository
from ..planning.calendar import build_calendar, count_by_date
from ..planning.editing import parse_date
from ..schemas.calendar import CalendarDayResponse, CalendarResponse
from .deps import get_identity, get_project_repository

router = APIRouter(prefix="/calendar", tags=["calendar"])


@router.get("", response_model=Union[CalendarResponse, CalendarDayResponse])
async def get_calendar(
    date: Optional[str] = Query(None, description="Single day, YYYY-MM-DD"),
    identity: Identity = Depends(get_identity),
    projects: ProjectRepository = Depends(get_project_repository),
):
    """All deadlines keyed by date, or just the ones on ``date``."""
    if date is not None:
        parse_date(date, "Date")

    items_by_date = build_calendar(await projects.list(identity.uid))

    if date is not None:
        return CalendarDayResponse(date=date, items=items_by_date.get(date, []))
    return CalendarResponse(items_by_date=items_by_date, counts=count_by_date(items_by_date))
