"""
Shortcut Synchronizer

Keeps the denormalized shortcut records in each member's private
project list consistent with shared-project membership. A shortcut
mirrors the shared project's card fields and points at it through
``sharedProjectId``.
"""
import asyncio
import logging
from typing import List, Optional

from ..schemas.project import Project
from ..schemas.shared import SharedProject
from ..store import DocumentStore, DocumentSnapshot, FieldFilter, StoreError, join_path, utc_now_iso
from ..tracer import trace_step, trace_write

logger = logging.getLogger(__name__)


def user_projects_path(uid: str) -> str:
    return join_path("users", uid, "projects")


class ShortcutSynchronizer:
    """Creates and removes shortcuts in users' private namespaces."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def find(self, uid: str, shared_project_id: str) -> List[DocumentSnapshot]:
        """Every shortcut of the user pointing at the shared project."""
        return await self.store.query(
            user_projects_path(uid),
            FieldFilter("sharedProjectId", "==", shared_project_id),
        )

    async def ensure(
        self,
        uid: str,
        shared: SharedProject,
        allocated_hours_per_week: float = 0,
    ) -> str:
        """
        Create the user's shortcut unless one already exists.

        Returns the id of the existing or new shortcut.
        """
        existing = await self.find(uid, shared.id)
        if existing:
            trace_step("planning.shortcuts", f"Shortcut for {shared.id} already exists for {uid}")
            return existing[0].id

        shortcut = {
            "title": shared.title,
            "description": shared.description,
            "isPrivate": False,
            "goals": [],
            "progress": shared.progress,
            "deadline": shared.deadline,
            "createdAt": utc_now_iso(),
            "isShared": True,
            "sharedProjectId": shared.id,
            "ownerUid": shared.owner_uid,
            "allocatedHoursPerWeek": allocated_hours_per_week,
        }
        trace_write("planning.shortcuts", "add", user_projects_path(uid), shared.id)
        shortcut_id = await self.store.add(user_projects_path(uid), shortcut)
        logger.info(f"Created shortcut {shortcut_id} to shared project {shared.id} for user {uid}")
        return shortcut_id

    async def remove_all(self, uid: str, shared_project_id: str) -> int:
        """Delete every shortcut of the user for the shared project; returns how many."""
        matches = await self.find(uid, shared_project_id)
        for snapshot in matches:
            trace_write("planning.shortcuts", "delete", snapshot.path)
        await asyncio.gather(*(self.store.delete(s.path) for s in matches))
        if matches:
            logger.info(f"Removed {len(matches)} shortcut(s) to {shared_project_id} for user {uid}")
        return len(matches)

    async def remove_for_members(self, member_uids: List[str], shared_project_id: str) -> int:
        """Delete the shortcuts of several users at once."""
        counts = await asyncio.gather(
            *(self.remove_all(uid, shared_project_id) for uid in dict.fromkeys(member_uids))
        )
        return sum(counts)

    async def _owner_of(self, shared_project_id: str) -> Optional[str]:
        try:
            data = await self.store.get(join_path("shareProjects", shared_project_id))
        except StoreError as e:
            logger.error(f"Failed to read shared project {shared_project_id}: {e}")
            return None
        if not data:
            return None
        return data.get("ownerUid") or None

    async def refresh_owners(self, projects: List[Project]) -> List[Project]:
        """Replace each shortcut's ownerUid with the shared project's current owner."""
        shared_ids = list(dict.fromkeys(
            p.shared_project_id for p in projects if p.is_shared and p.shared_project_id
        ))
        if not shared_ids:
            return projects

        owners = dict(zip(shared_ids, await asyncio.gather(*(self._owner_of(i) for i in shared_ids))))

        refreshed = []
        for project in projects:
            latest = owners.get(project.shared_project_id) if project.is_shared else None
            if latest:
                project = project.model_copy(update={"owner_uid": latest})
            refreshed.append(project)
        return refreshed
