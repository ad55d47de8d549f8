"""
Project Repository

Private projects in ``users/{uid}/projects``, including the shortcuts
that point at shared projects. Creating a shared project and deleting a
shortcut reach into the shared namespace through SharedProjectRepository.
"""
import logging
from typing import Any, Dict, List, Optional

from ..schemas.project import Project, ProjectCreate, ProjectUpdate
from ..schemas.shared import Member
from ..store import DocumentNotFoundError, DocumentStore, join_path, utc_now_iso
from ..tracer import trace_step, trace_write
from .editing import clean_project_deadline, require_title
from .errors import NotFound, ValidationFailed
from .identity import Identity
from .normalize import normalize_project
from .progress import calculate_progress
from .sanitize import strip_absent
from .shared import SharedProjectRepository
from .shortcuts import user_projects_path

logger = logging.getLogger(__name__)

MISSING_MESSAGE = "This project does not exist."

# Card fields mirrored onto the shared document when a shortcut is edited
SHARED_CARD_FIELDS = ("title", "description", "deadline", "allocatedHoursPerWeek")


def project_path(uid: str, project_id: str) -> str:
    return join_path("users", uid, "projects", project_id)


def to_document(project: Project) -> Dict[str, Any]:
    """Serialize for the store, without the id and without absent fields."""
    return strip_absent(project.model_dump(by_alias=True, mode="json", exclude={"id"}))


def _newest_first(projects: List[Project]) -> List[Project]:
    return sorted(projects, key=lambda p: p.created_at or "", reverse=True)


class ProjectRepository:
    """Store access for one user's private project list."""

    def __init__(self, store: DocumentStore, shared: Optional[SharedProjectRepository] = None):
        self.store = store
        self.shared = shared or SharedProjectRepository(store)

    async def list(self, uid: str) -> List[Project]:
        """The user's projects, newest first, with shortcut owners refreshed."""
        snapshots = await self.store.list_collection(user_projects_path(uid))
        projects = [normalize_project(s.id, s.data) for s in snapshots]
        projects = await self.shared.shortcuts.refresh_owners(projects)
        return _newest_first(projects)

    async def get(self, uid: str, project_id: str) -> Project:
        data = await self.store.get(project_path(uid, project_id))
        if data is None:
            raise NotFound(MISSING_MESSAGE)
        return normalize_project(project_id, data)

    async def create(self, identity: Identity, data: ProjectCreate, owner: Optional[Member] = None) -> Project:
        """
        Create a private project, or a shared project plus its shortcut.

        ``owner`` is the caller's member record and is only used for
        shared projects.
        """
        title = require_title(data.title)
        deadline = clean_project_deadline(data.deadline)

        if not data.is_private:
            if owner is None:
                owner = Member(id=identity.uid, nickname=identity.login_id or identity.uid)
            _, shortcut_id = await self.shared.create(identity, owner, data)
            return await self.get(identity.uid, shortcut_id)

        project = Project(
            id="pending",
            title=title,
            description=data.description.strip(),
            deadline=deadline,
            allocated_hours_per_week=data.allocated_hours_per_week,
            created_at=utc_now_iso(),
        )
        project_id = await self.store.add(user_projects_path(identity.uid), to_document(project))
        logger.info(f"Created private project {project_id} for user {identity.uid}")
        return project.model_copy(update={"id": project_id})

    async def save(self, uid: str, project: Project) -> Project:
        """Write the full project back with progress recomputed."""
        saved = project.model_copy(deep=True)
        saved.progress = calculate_progress(saved.goals)

        path = project_path(uid, saved.id)
        trace_write("planning.projects", "update", path, f"progress={saved.progress}")
        try:
            await self.store.update(path, to_document(saved))
        except DocumentNotFoundError:
            raise NotFound(MISSING_MESSAGE)
        return saved

    async def update(self, uid: str, project_id: str, data: ProjectUpdate) -> Project:
        """
        Edit the project card.

        For a shortcut the same fields are written to the shared project
        in the same call, and it always stays non-private.
        """
        project = await self.get(uid, project_id)
        if project.is_shared and project.shared_project_id:
            # Nothing is written when the shared project is gone
            await self.shared.get(project.shared_project_id)
        changes: Dict[str, Any] = {}

        if data.title is not None:
            changes["title"] = require_title(data.title)
        if data.description is not None:
            changes["description"] = data.description.strip()
        if data.deadline is not None:
            changes["deadline"] = clean_project_deadline(data.deadline)
        if data.allocated_hours_per_week is not None:
            changes["allocated_hours_per_week"] = data.allocated_hours_per_week
        if data.is_private is not None:
            changes["is_private"] = data.is_private and not project.is_shared

        updated = project.model_copy(update=changes)
        fields = to_document(updated)
        path = project_path(uid, project_id)
        trace_write("planning.projects", "update", path, list(changes))
        try:
            await self.store.update(path, fields)
        except DocumentNotFoundError:
            raise NotFound(MISSING_MESSAGE)

        if project.is_shared and project.shared_project_id:
            await self.shared.update_card(
                project.shared_project_id,
                {key: fields[key] for key in SHARED_CARD_FIELDS if key in fields},
            )
        return updated

    async def delete(self, uid: str, project_id: str, confirm: bool) -> None:
        """
        Delete a project from the user's list.

        A shortcut owned by the user deletes the shared project for
        everyone; a member's shortcut only disappears from their own list.
        """
        if not confirm:
            raise ValidationFailed("Confirm before deleting the project.")
        project = await self.get(uid, project_id)

        if project.is_shared and project.shared_project_id:
            shared = await self.shared.find(project.shared_project_id)
            if shared is not None and shared.owner_uid == uid:
                trace_step("planning.projects", f"Owner {uid} deleting shared project {shared.id}")
                # Removes this shortcut along with every member's
                await self.shared.delete(shared.id, uid, confirm=True)
                return

        trace_write("planning.projects", "delete", project_path(uid, project_id))
        await self.store.delete(project_path(uid, project_id))
        logger.info(f"Deleted project {project_id} for user {uid}")
