# Planning domain: projects, shared membership, progress and derived views
from .errors import (
    PlanningError,
    ValidationFailed,
    NotFound,
    MembershipConflict,
    AuthRequired,
    AuthPending,
)
from .identity import AuthState, Identity
from .progress import calculate_progress
from .sanitize import UNSET, strip_absent
from .shortcuts import ShortcutSynchronizer
from .shared import SharedProjectRepository
from .projects import ProjectRepository
from .profiles import ProfileRepository, CapacityRepository

__all__ = [
    "PlanningError",
    "ValidationFailed",
    "NotFound",
    "MembershipConflict",
    "AuthRequired",
    "AuthPending",
    "AuthState",
    "Identity",
    "calculate_progress",
    "UNSET",
    "strip_absent",
    "ShortcutSynchronizer",
    "SharedProjectRepository",
    "ProjectRepository",
    "ProfileRepository",
    "CapacityRepository",
]
