"""
API Dependencies

Identity resolution from the auth provider's headers, plus the store
and repository instances handed to the routers.
"""
import logging
from typing import Optional

from fastapi import Depends, Header

from ..planning import (
    AuthPending,
    AuthRequired,
    AuthState,
    CapacityRepository,
    Identity,
    ProfileRepository,
    ProjectRepository,
    SharedProjectRepository,
)
from ..store import BlobStore, DocumentStore, StoreError, get_blob_store, get_document_store

logger = logging.getLogger(__name__)


def get_store() -> DocumentStore:
    return get_document_store()


def get_blobs() -> BlobStore:
    return get_blob_store()


def resolve_auth_state(auth_state: Optional[str], uid: Optional[str]) -> AuthState:
    """Signed in by default when a user id is present."""
    if auth_state:
        try:
            state = AuthState(auth_state.strip().lower())
        except ValueError:
            logger.warning(f"Unknown auth state header {auth_state!r}")
            state = AuthState.SIGNED_OUT
        if state == AuthState.SIGNED_IN and not uid:
            return AuthState.SIGNED_OUT
        return state
    return AuthState.SIGNED_IN if uid else AuthState.SIGNED_OUT


async def get_identity(
    store: DocumentStore = Depends(get_store),
    x_user_id: Optional[str] = Header(None),
    x_user_email: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
    x_user_photo: Optional[str] = Header(None),
    x_auth_state: Optional[str] = Header(None),
) -> Identity:
    """
    The signed-in caller.

    Creates the profile document on first sight; a failure there is
    logged and does not block the request.
    """
    uid = (x_user_id or "").strip()
    state = resolve_auth_state(x_auth_state, uid)
    if state == AuthState.PENDING:
        raise AuthPending("Still checking your sign-in. Try again in a moment.")
    if state == AuthState.SIGNED_OUT:
        raise AuthRequired("Sign in to continue.")

    identity = Identity(
        uid=uid,
        display_name=x_user_name or None,
        email=x_user_email or None,
        photo_url=x_user_photo or None,
    )
    try:
        await ProfileRepository(store).ensure(identity)
    except StoreError as e:
        logger.error(f"Failed to create profile for {identity.uid}: {e}")
    return identity


def get_shared_repository(store: DocumentStore = Depends(get_store)) -> SharedProjectRepository:
    return SharedProjectRepository(store)


def get_project_repository(store: DocumentStore = Depends(get_store)) -> ProjectRepository:
    return ProjectRepository(store)


def get_profile_repository(
    store: DocumentStore = Depends(get_store),
    blobs: BlobStore = Depends(get_blobs),
) -> ProfileRepository:
    return ProfileRepository(store, blobs)


def get_capacity_repository(store: DocumentStore = Depends(get_store)) -> CapacityRepository:
    return CapacityRepository(store)
