"""
Membership State Machine

Pure transitions of a shared project's membership, from the point of
view of one user:

    NOT_MEMBER --join--> MEMBER
    MEMBER --leave--> NOT_MEMBER
    OWNER --leave (last member)--> NOT_MEMBER, project deleted
    OWNER --leave with handoff--> NOT_MEMBER, ownership transferred

Functions return new SharedProject values; persistence and shortcut
bookkeeping happen in SharedProjectRepository.
"""
from typing import List, Optional

from ..schemas.shared import (
    LeaveKind,
    LeavePlan,
    Member,
    MembershipState,
    SharedProject,
)
from .errors import MembershipConflict, ValidationFailed
from .sanitize import UNSET

LEAVE_AS_MEMBER_WARNING = (
    "Leave this shared project? You will be removed from the member list "
    "and its shortcut will be removed from your project list."
)
DELETE_AS_LAST_MEMBER_WARNING = (
    "You are the only member of this shared project. Leaving deletes the "
    "whole shared project, including every goal, task and issue, and "
    "removes it from your project list."
)
HANDOFF_WARNING = (
    "You own this shared project. Choose a member to become the new owner "
    "before you leave."
)


def membership_state(project: SharedProject, uid: str) -> MembershipState:
    if project.owner_uid and project.owner_uid == uid:
        return MembershipState.OWNER
    if project.has_member(uid) or uid in project.member_uids:
        return MembershipState.MEMBER
    return MembershipState.NOT_MEMBER


def other_members(project: SharedProject, uid: str) -> List[Member]:
    return [m for m in project.members if m.id != uid]


def add_member(project: SharedProject, member: Member, email: Optional[str]) -> SharedProject:
    """Append the member record and add the id and email, without duplicates."""
    updated = project.model_copy(deep=True)
    if not updated.has_member(member.id):
        updated.members.append(member)
    if member.id not in updated.member_uids:
        updated.member_uids.append(member.id)
    if email and email not in updated.member_emails:
        updated.member_emails.append(email)
    return updated


def remove_member(project: SharedProject, uid: str, email: Optional[str]) -> SharedProject:
    """Drop the user's member record, id and email."""
    updated = project.model_copy(deep=True)
    updated.members = [m for m in updated.members if m.id != uid]
    updated.member_uids = [u for u in updated.member_uids if u != uid]
    if email:
        updated.member_emails = [e for e in updated.member_emails if e != email]
    return updated


def plan_leave(project: SharedProject, uid: str) -> LeavePlan:
    """Decide which leave transition applies to the user."""
    state = membership_state(project, uid)
    if state == MembershipState.NOT_MEMBER:
        raise MembershipConflict("You are not a member of this shared project.")

    if state == MembershipState.MEMBER:
        return LeavePlan(kind=LeaveKind.LEAVE_AS_MEMBER, warning=LEAVE_AS_MEMBER_WARNING)

    remaining = other_members(project, uid)
    if not remaining:
        return LeavePlan(kind=LeaveKind.DELETE_AS_LAST_MEMBER, warning=DELETE_AS_LAST_MEMBER_WARNING)

    return LeavePlan(
        kind=LeaveKind.HANDOFF,
        warning=HANDOFF_WARNING,
        candidates=remaining,
        default_new_owner_uid=remaining[0].id,
    )


def leave_as_member(project: SharedProject, uid: str, email: Optional[str]) -> SharedProject:
    if membership_state(project, uid) != MembershipState.MEMBER:
        raise MembershipConflict("The owner cannot leave without handing off or deleting the project.")
    return remove_member(project, uid, email)


def hand_off(
    project: SharedProject,
    uid: str,
    email: Optional[str],
    new_owner_uid: Optional[str],
) -> SharedProject:
    """Transfer ownership to a remaining member and remove the leaving owner."""
    if membership_state(project, uid) != MembershipState.OWNER:
        raise MembershipConflict("Only the owner can hand off ownership.")
    if not new_owner_uid:
        raise ValidationFailed("Choose the new owner.")
    if not any(m.id == new_owner_uid for m in other_members(project, uid)):
        raise ValidationFailed("The selected member was not found.")

    updated = remove_member(project, uid, email)
    updated.owner_uid = new_owner_uid
    return updated


def sync_member_profile(
    project: SharedProject,
    uid: str,
    nickname: str,
    avatar_url=UNSET,
) -> Optional[SharedProject]:
    """
    Rewrite the user's member record to a new label (and avatar).

    Returns None when the user is not a member or nothing would change,
    so callers can skip the write.
    """
    if not project.has_member(uid):
        return None

    members = []
    for m in project.members:
        if m.id == uid:
            changes = {"nickname": nickname, "name": nickname}
            if avatar_url is not UNSET:
                changes["avatar_url"] = avatar_url or None
            m = m.model_copy(update=changes)
        members.append(m)

    if [m.model_dump() for m in members] == [m.model_dump() for m in project.members]:
        return None

    updated = project.model_copy(deep=True)
    updated.members = members
    return updated
