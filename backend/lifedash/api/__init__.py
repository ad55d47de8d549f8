# API Routes
from .projects import router as projects_router
from .shared import router as shared_router
from .content import router as content_router
from .calendar import router as calendar_router
from .resources import router as resources_router
from .profile import router as profile_router
from .events import router as events_router
from .blobs import router as blobs_router

__all__ = [
    "projects_router",
    "shared_router",
    "content_router",
    "calendar_router",
    "resources_router",
    "profile_router",
    "events_router",
    "blobs_router",
]
