"""
Profile and Settings Schemas

Pydantic models for user profiles, per-user settings, and the resource
allocation summary.
"""
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field

from .project import DOCUMENT_CONFIG, REQUEST_CONFIG


class Profile(BaseModel):
    """The ``users/{uid}`` profile document."""
    display_name: str = ""
    nickname: Optional[str] = None
    photo_url: str = Field("", alias="photoURL")
    created_at: Optional[str] = None

    model_config = DOCUMENT_CONFIG


class ProfileResponse(BaseModel):
    """Profile as shown on the profile page."""
    uid: str
    email: Optional[str] = None
    nickname: str
    photo_url: str = Field("", alias="photoURL")

    model_config = DOCUMENT_CONFIG


class ProfileUpdate(BaseModel):
    """Request to save nickname and avatar."""
    nickname: str = Field(..., max_length=100)
    photo_url: Optional[str] = Field(None, alias="photoURL")

    model_config = REQUEST_CONFIG


class ProfileSaveResponse(BaseModel):
    """Outcome of a profile save."""
    profile: ProfileResponse
    synced_projects: int

    model_config = DOCUMENT_CONFIG


class DisplayNameUpdate(BaseModel):
    """Request to change the display-name preference."""
    display_name: str = Field(..., max_length=100)

    model_config = REQUEST_CONFIG


class DisplayNameResponse(BaseModel):
    """Stored display name and how many shared projects were rewritten."""
    display_name: str
    synced_projects: int

    model_config = DOCUMENT_CONFIG


class AvatarResponse(BaseModel):
    """URL of the uploaded avatar."""
    photo_url: str = Field("", alias="photoURL")

    model_config = DOCUMENT_CONFIG


class CapacitySetting(BaseModel):
    """Hours per week the user can spend across projects."""
    weekly_capacity: float

    model_config = DOCUMENT_CONFIG


class CapacityUpdate(BaseModel):
    """Request to change the weekly capacity."""
    weekly_capacity: float

    model_config = REQUEST_CONFIG


class LoadLevel(str, Enum):
    """How full the week is."""
    COMFORTABLE = "comfortable"
    FULL = "full"
    OVERLOADED = "overloaded"


class ProjectAllocation(BaseModel):
    """Hours one project takes per week."""
    project_id: str
    title: str
    allocated_hours_per_week: float
    routine_hours_per_week: float

    model_config = DOCUMENT_CONFIG


class ResourceSummary(BaseModel):
    """Weekly capacity against the sum of project allocations."""
    total_allocated: float
    weekly_capacity: float
    utilization: float
    utilization_percent: int
    load_level: LoadLevel
    projects: List[ProjectAllocation] = []

    model_config = DOCUMENT_CONFIG
