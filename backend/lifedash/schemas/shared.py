"""
Shared Project Schemas

Pydantic models for shared projects, their members, and the membership
API requests and responses.
"""
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel

from .project import ProjectContent, DOCUMENT_CONFIG, REQUEST_CONFIG


# Shown when a member record carries neither nickname nor name
UNNAMED_MEMBER = "unnamed"


class Member(BaseModel):
    """Denormalized copy of a participating user's profile."""
    id: str
    nickname: Optional[str] = None
    name: Optional[str] = None  # Older records only carry this
    avatar_url: Optional[str] = None

    model_config = DOCUMENT_CONFIG

    @property
    def label(self) -> str:
        """Display label, nickname preferred."""
        return self.nickname or self.name or UNNAMED_MEMBER


class SharedProject(ProjectContent):
    """
    Canonical shared entity living in the global shared namespace.

    ``owner_uid`` always appears in ``member_uids`` after a save.
    """
    is_private: bool = False
    owner_uid: str = ""
    members: List[Member] = []
    member_uids: List[str] = []
    member_emails: List[str] = []

    def has_member(self, uid: str) -> bool:
        return any(m.id == uid for m in self.members)

    def member(self, uid: str) -> Optional[Member]:
        return next((m for m in self.members if m.id == uid), None)


class MembershipState(str, Enum):
    """A user's relation to a shared project."""
    NOT_MEMBER = "not-member"
    MEMBER = "member"
    OWNER = "owner"


class LeaveKind(str, Enum):
    """Which leave transition applies to the caller."""
    LEAVE_AS_MEMBER = "leave-as-member"
    DELETE_AS_LAST_MEMBER = "delete-as-last-member"
    HANDOFF = "handoff"


# ===========================================
# Requests
# ===========================================

class LeaveRequest(BaseModel):
    """Confirmed request to leave a shared project."""
    confirm: bool = False
    new_owner_uid: Optional[str] = None

    model_config = REQUEST_CONFIG


# ===========================================
# Responses
# ===========================================

class LeavePlan(BaseModel):
    """What leaving would do, shown to the user before confirming."""
    kind: LeaveKind
    warning: str
    candidates: List[Member] = []
    default_new_owner_uid: Optional[str] = None

    model_config = DOCUMENT_CONFIG


class LeaveResponse(BaseModel):
    """Outcome of a completed leave."""
    kind: LeaveKind
    project_deleted: bool
    shortcuts_removed: int
    new_owner_uid: Optional[str] = None
    redirect_to: str = "/projects"

    model_config = DOCUMENT_CONFIG


class JoinResponse(BaseModel):
    """Outcome of a join."""
    project: SharedProject
    shortcut_id: str
    already_member: bool

    model_config = DOCUMENT_CONFIG


class SharedProjectView(BaseModel):
    """A shared project from the viewer's point of view."""
    project: SharedProject
    membership: MembershipState
    can_edit: bool
    join_required: bool
    other_members: List[Member] = []
    share_url: str

    model_config = DOCUMENT_CONFIG


class ShareLinkResponse(BaseModel):
    """Shareable link granting the join prompt."""
    shared_project_id: str
    url: str

    model_config = DOCUMENT_CONFIG
