"""
Caller Identity

The authentication provider is external; it hands us an opaque user id
plus display attributes, or tells us the caller is signed out or not
resolved yet.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..schemas.profile import Profile


class AuthState(str, Enum):
    """Tri-state reported by the identity provider."""
    SIGNED_IN = "signed-in"
    SIGNED_OUT = "signed-out"
    PENDING = "pending"


@dataclass(frozen=True)
class Identity:
    """A signed-in user as reported by the identity provider."""
    uid: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = None

    @property
    def login_id(self) -> str:
        """Email local part, used as the starting display name."""
        if self.email:
            return self.email.split("@")[0]
        return ""


def resolve_nickname(
    identity: Identity,
    profile: Optional[Profile],
    display_name_preference: Optional[str],
    anonymous_label: str,
) -> str:
    """
    Pick the label a user appears under inside shared projects.

    Order: live display-name preference, profile nickname, profile
    display name, provider display name, email, anonymous label.
    """
    candidates = [
        display_name_preference,
        profile.nickname if profile else None,
        profile.display_name if profile else None,
        identity.display_name,
        identity.email,
    ]
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate.strip()
    return anonymous_label


def resolve_avatar(identity: Identity, profile: Optional[Profile]) -> Optional[str]:
    """Avatar from the stored profile, else from the provider."""
    if profile and profile.photo_url:
        return profile.photo_url
    return identity.photo_url or None
