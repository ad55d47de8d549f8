"""
Profiles and User Settings

The ``users/{uid}`` profile document, the display-name preference, the
weekly capacity setting and avatar images in the blob store.
"""
import logging
import math
from typing import Optional

from ..config import settings
from ..schemas.profile import Profile, ProfileResponse, ProfileUpdate
from ..schemas.shared import Member
from ..store import BlobStore, DocumentStore, StoreError, join_path, utc_now_iso
from ..tracer import trace_write
from .identity import Identity, resolve_avatar, resolve_nickname

logger = logging.getLogger(__name__)

# Used when the identity carries no email to derive a display name from
DEFAULT_DISPLAY_NAME = "user"


def profile_path(uid: str) -> str:
    return join_path("users", uid)


def capacity_path(uid: str) -> str:
    return join_path("users", uid, "settings", "dashboardCapacity")


def preferences_path(uid: str) -> str:
    return join_path("users", uid, "settings", "preferences")


def avatar_key(uid: str) -> str:
    return f"avatars/{uid}"


class ProfileRepository:
    """Profile documents and the values derived from them."""

    def __init__(self, store: DocumentStore, blobs: Optional[BlobStore] = None):
        self.store = store
        self.blobs = blobs

    async def get(self, uid: str) -> Optional[Profile]:
        data = await self.store.get(profile_path(uid))
        if data is None:
            return None
        return Profile.model_validate(data)

    async def ensure(self, identity: Identity) -> Profile:
        """Create the profile on first sign-in; existing profiles are left alone."""
        profile = await self.get(identity.uid)
        if profile is not None:
            return profile

        profile = Profile(
            display_name=identity.login_id or DEFAULT_DISPLAY_NAME,
            photo_url=identity.photo_url or "",
            created_at=utc_now_iso(),
        )
        trace_write("planning.profiles", "set", profile_path(identity.uid))
        await self.store.set(profile_path(identity.uid), profile.model_dump(by_alias=True, exclude_none=True))
        logger.info(f"Created profile for user {identity.uid}")
        return profile

    async def get_display_name(self, uid: str) -> Optional[str]:
        data = await self.store.get(preferences_path(uid))
        if not data:
            return None
        value = data.get("displayName")
        return value if isinstance(value, str) and value.strip() else None

    async def set_display_name(self, uid: str, display_name: str) -> str:
        cleaned = display_name.strip()
        trace_write("planning.profiles", "set", preferences_path(uid), cleaned)
        await self.store.set(preferences_path(uid), {"displayName": cleaned}, merge=True)
        return cleaned

    async def _safe_profile(self, uid: str) -> Optional[Profile]:
        try:
            return await self.get(uid)
        except StoreError as e:
            logger.error(f"Failed to read profile of {uid}: {e}")
            return None

    async def nickname_for(self, identity: Identity) -> str:
        """The label the user appears under in shared projects."""
        profile = await self._safe_profile(identity.uid)
        try:
            preference = await self.get_display_name(identity.uid)
        except StoreError as e:
            logger.error(f"Failed to read display name preference of {identity.uid}: {e}")
            preference = None
        return resolve_nickname(identity, profile, preference, settings.anonymous_label)

    async def member_for(self, identity: Identity) -> Member:
        """Member record for the user, as added on join."""
        profile = await self._safe_profile(identity.uid)
        nickname = await self.nickname_for(identity)
        return Member(id=identity.uid, nickname=nickname, avatar_url=resolve_avatar(identity, profile))

    async def view(self, identity: Identity) -> ProfileResponse:
        profile = await self.get(identity.uid)
        nickname = resolve_nickname(identity, profile, None, settings.anonymous_label)
        return ProfileResponse(
            uid=identity.uid,
            email=identity.email,
            nickname=nickname,
            photo_url=resolve_avatar(identity, profile) or "",
        )

    async def save(self, identity: Identity, data: ProfileUpdate) -> ProfileResponse:
        """Store nickname (also as displayName) and photo URL."""
        nickname = data.nickname.strip()
        fields = {"nickname": nickname, "displayName": nickname}
        if data.photo_url is not None:
            fields["photoURL"] = data.photo_url
        trace_write("planning.profiles", "set", profile_path(identity.uid), fields)
        await self.store.set(profile_path(identity.uid), fields, merge=True)
        return await self.view(identity)

    async def upload_avatar(self, uid: str, data: bytes) -> str:
        if self.blobs is None:
            raise StoreError("No blob store configured")
        url = await self.blobs.upload(avatar_key(uid), data)
        await self.store.set(profile_path(uid), {"photoURL": url}, merge=True)
        logger.info(f"Uploaded avatar for user {uid}")
        return url

    async def delete_avatar(self, uid: str) -> None:
        if self.blobs is None:
            raise StoreError("No blob store configured")
        await self.blobs.delete(avatar_key(uid))
        await self.store.set(profile_path(uid), {"photoURL": ""}, merge=True)
        logger.info(f"Deleted avatar for user {uid}")


class CapacityRepository:
    """The weekly capacity setting."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get(self, uid: str) -> float:
        """Stored capacity, or the default when missing, invalid or unreadable."""
        try:
            data = await self.store.get(capacity_path(uid))
        except StoreError as e:
            logger.error(f"Failed to load weekly capacity of {uid}: {e}")
            return settings.default_weekly_capacity

        value = (data or {}).get("weeklyCapacity")
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            return settings.default_weekly_capacity
        return value

    async def save(self, uid: str, weekly_capacity: float) -> float:
        """Store the capacity; non-positive or non-finite input becomes 1."""
        if not math.isfinite(weekly_capacity) or weekly_capacity <= 0:
            weekly_capacity = 1
        trace_write("planning.profiles", "set", capacity_path(uid), weekly_capacity)
        await self.store.set(capacity_path(uid), {"weeklyCapacity": weekly_capacity}, merge=True)
        return weekly_capacity
