"""
Shared Project Repository

Persists shared projects in the global ``shareProjects`` namespace and
runs the membership transitions (join, leave, handoff, owner delete,
profile sync) against the store, keeping members' shortcuts in step.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from ..config import settings
from ..schemas.project import ProjectCreate
from ..schemas.shared import (
    JoinResponse,
    LeaveKind,
    LeavePlan,
    LeaveRequest,
    LeaveResponse,
    Member,
    MembershipState,
    SharedProject,
    SharedProjectView,
)
from ..store import DocumentNotFoundError, DocumentStore, FieldFilter, join_path, utc_now_iso
from ..tracer import trace_result, trace_section, trace_step, trace_transition, trace_write
from . import membership
from .editing import clean_project_deadline, require_title
from .errors import MembershipConflict, NotFound, ValidationFailed
from .identity import Identity
from .normalize import normalize_shared_project
from .progress import calculate_progress
from .sanitize import UNSET, strip_absent
from .shortcuts import ShortcutSynchronizer

logger = logging.getLogger(__name__)

SHARED_COLLECTION = "shareProjects"
MISSING_MESSAGE = "This shared project does not exist."


def shared_project_path(project_id: str) -> str:
    return join_path(SHARED_COLLECTION, project_id)


def to_document(project: SharedProject) -> Dict[str, Any]:
    """Serialize for the store, without the id and without absent fields."""
    return strip_absent(project.model_dump(by_alias=True, mode="json", exclude={"id"}))


def require_member(project: SharedProject, uid: str) -> MembershipState:
    """Raise unless the user may edit the shared project."""
    state = membership.membership_state(project, uid)
    if state == MembershipState.NOT_MEMBER:
        raise MembershipConflict("Join this shared project to edit it.")
    return state


class SharedProjectRepository:
    """
    Store access for shared projects.

    Every write goes through ``save``, which sanitizes the document,
    puts a missing owner back into memberUids and recomputes progress.
    """

    def __init__(self, store: DocumentStore, shortcuts: Optional[ShortcutSynchronizer] = None):
        self.store = store
        self.shortcuts = shortcuts or ShortcutSynchronizer(store)

    async def find(self, project_id: str) -> Optional[SharedProject]:
        data = await self.store.get(shared_project_path(project_id))
        if data is None:
            return None
        return normalize_shared_project(project_id, data)

    async def get(self, project_id: str) -> SharedProject:
        project = await self.find(project_id)
        if project is None:
            raise NotFound(MISSING_MESSAGE)
        return project

    async def save(self, project: SharedProject) -> SharedProject:
        """
        Write the full shared project back.

        Returns the project as stored. A project deleted in the meantime
        raises NotFound instead of being recreated.
        """
        saved = project.model_copy(deep=True)
        if saved.owner_uid and saved.owner_uid not in saved.member_uids:
            logger.warning(
                f"Shared project {saved.id} owner {saved.owner_uid} missing from memberUids, re-adding"
            )
            saved.member_uids.append(saved.owner_uid)
        saved.progress = calculate_progress(saved.goals)

        path = shared_project_path(saved.id)
        trace_write("planning.shared", "update", path, f"progress={saved.progress}")
        try:
            await self.store.update(path, to_document(saved))
        except DocumentNotFoundError:
            raise NotFound(MISSING_MESSAGE)
        return saved

    async def create(self, identity: Identity, owner: Member, data: ProjectCreate) -> Tuple[SharedProject, str]:
        """
        Create a shared project owned by the caller plus the owner's shortcut.

        Returns (project, shortcut id).
        """
        title = require_title(data.title)
        project = SharedProject(
            id="pending",
            title=title,
            description=data.description.strip(),
            deadline=clean_project_deadline(data.deadline),
            allocated_hours_per_week=data.allocated_hours_per_week,
            created_at=utc_now_iso(),
            owner_uid=identity.uid,
            members=[owner],
            member_uids=[identity.uid],
            member_emails=[identity.email] if identity.email else [],
        )
        project_id = await self.store.add(SHARED_COLLECTION, to_document(project))
        project = project.model_copy(update={"id": project_id})
        logger.info(f"Created shared project {project_id} owned by {identity.uid}")

        shortcut_id = await self.shortcuts.ensure(
            identity.uid, project, allocated_hours_per_week=data.allocated_hours_per_week
        )
        return project, shortcut_id

    async def update_card(self, project_id: str, fields: Dict[str, Any]) -> None:
        """Write edited card fields straight to the shared document."""
        path = shared_project_path(project_id)
        trace_write("planning.shared", "update", path, fields)
        try:
            await self.store.update(path, strip_absent(fields))
        except DocumentNotFoundError:
            raise NotFound(MISSING_MESSAGE)

    def view(self, project: SharedProject, uid: str) -> SharedProjectView:
        state = membership.membership_state(project, uid)
        return SharedProjectView(
            project=project,
            membership=state,
            can_edit=state != MembershipState.NOT_MEMBER,
            join_required=state == MembershipState.NOT_MEMBER,
            other_members=membership.other_members(project, uid),
            share_url=settings.share_url(project.id),
        )

    async def join(self, project_id: str, identity: Identity, member: Member) -> JoinResponse:
        """Add the caller as a member; idempotent for existing members."""
        trace_section("join shared project")
        project = await self.get(project_id)
        state = membership.membership_state(project, identity.uid)
        already_member = state != MembershipState.NOT_MEMBER

        if not already_member:
            project = await self.save(membership.add_member(project, member, identity.email))
            trace_transition("planning.shared", identity.uid, state, MembershipState.MEMBER)
            logger.info(f"User {identity.uid} joined shared project {project_id}")
        else:
            trace_step("planning.shared", f"{identity.uid} is already {state.value}")

        shortcut_id = await self.shortcuts.ensure(identity.uid, project)
        trace_result("planning.shared", "join", True, shortcut_id)
        return JoinResponse(project=project, shortcut_id=shortcut_id, already_member=already_member)

    async def plan_leave(self, project_id: str, uid: str) -> LeavePlan:
        return membership.plan_leave(await self.get(project_id), uid)

    async def leave(self, project_id: str, identity: Identity, request: LeaveRequest) -> LeaveResponse:
        """Run whichever leave transition applies to the caller."""
        if not request.confirm:
            raise ValidationFailed("Confirm before leaving the shared project.")

        trace_section("leave shared project")
        project = await self.get(project_id)
        plan = membership.plan_leave(project, identity.uid)
        trace_step("planning.shared", f"Leave kind for {identity.uid}: {plan.kind.value}")

        if plan.kind == LeaveKind.DELETE_AS_LAST_MEMBER:
            removed = await self._delete(project)
            trace_transition("planning.shared", identity.uid, MembershipState.OWNER, MembershipState.NOT_MEMBER)
            trace_result("planning.shared", "leave", True, "project deleted")
            return LeaveResponse(kind=plan.kind, project_deleted=True, shortcuts_removed=removed)

        if plan.kind == LeaveKind.HANDOFF:
            updated = membership.hand_off(project, identity.uid, identity.email, request.new_owner_uid)
            from_state = MembershipState.OWNER
        else:
            updated = membership.leave_as_member(project, identity.uid, identity.email)
            from_state = MembershipState.MEMBER

        saved = await self.save(updated)
        removed = await self.shortcuts.remove_all(identity.uid, project_id)
        trace_transition("planning.shared", identity.uid, from_state, MembershipState.NOT_MEMBER)

        if plan.kind == LeaveKind.HANDOFF:
            logger.info(f"Shared project {project_id} handed off from {identity.uid} to {saved.owner_uid}")
        else:
            logger.info(f"User {identity.uid} left shared project {project_id}")
        trace_result("planning.shared", "leave", True, plan.kind.value)

        return LeaveResponse(
            kind=plan.kind,
            project_deleted=False,
            shortcuts_removed=removed,
            new_owner_uid=saved.owner_uid if plan.kind == LeaveKind.HANDOFF else None,
        )

    async def delete(self, project_id: str, uid: str, confirm: bool) -> int:
        """Owner-only delete; returns how many shortcuts were removed."""
        if not confirm:
            raise ValidationFailed("Confirm before deleting the shared project.")
        project = await self.get(project_id)
        if membership.membership_state(project, uid) != MembershipState.OWNER:
            raise MembershipConflict("Only the owner can delete this shared project.")
        return await self._delete(project)

    async def _delete(self, project: SharedProject) -> int:
        uids = list(project.member_uids)
        if project.owner_uid:
            uids.append(project.owner_uid)

        path = shared_project_path(project.id)
        trace_write("planning.shared", "delete", path)
        await self.store.delete(path)
        logger.info(f"Deleted shared project {project.id}")
        return await self.shortcuts.remove_for_members(uids, project.id)

    async def projects_of(self, uid: str) -> List[SharedProject]:
        snapshots = await self.store.query(
            SHARED_COLLECTION,
            FieldFilter("memberUids", "array-contains", uid),
        )
        return [normalize_shared_project(s.id, s.data) for s in snapshots]

    async def sync_profile(self, uid: str, nickname: str, avatar_url=UNSET) -> int:
        """
        Rewrite the user's member record in every shared project they belong to.

        Projects whose member list would not change are skipped. Returns
        the number of projects written.
        """
        trace_section("profile sync")
        synced = 0
        for project in await self.projects_of(uid):
            updated = membership.sync_member_profile(project, uid, nickname, avatar_url)
            if updated is None:
                trace_step("planning.shared", f"{project.id} unchanged, skipping")
                continue
            await self.save(updated)
            synced += 1

        if synced:
            logger.info(f"Synced profile of {uid} into {synced} shared project(s)")
        trace_result("planning.shared", "sync_profile", True, synced)
        return synced