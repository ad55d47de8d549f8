"""
Events API

Server-Sent Events endpoint for live project updates.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from ..events import ChangeType, DocumentEvent
from ..planning import Identity, ProjectRepository, SharedProjectRepository
from ..planning.projects import project_path
from ..planning.shared import shared_project_path
from ..store import DocumentStore, StoreError
from .content import ProjectScope
from .deps import get_identity, get_project_repository, get_shared_repository, get_store

router = APIRouter(prefix="/{scope}/{project_id}", tags=["events"])


@router.get("/events")
async def stream_events(
    scope: ProjectScope,
    project_id: str,
    request: Request,
    identity: Identity = Depends(get_identity),
    store: DocumentStore = Depends(get_store),
    projects: ProjectRepository = Depends(get_project_repository),
    shared: SharedProjectRepository = Depends(get_shared_repository),
):
    """
    Stream changes of a project using Server-Sent Events.

    The current document is sent first, then every later write. The
    stream ends when the project is deleted.
    """
    if scope == ProjectScope.PROJECTS:
        await projects.get(identity.uid, project_id)
        path = project_path(identity.uid, project_id)
    else:
        await shared.get(project_id)
        path = shared_project_path(project_id)

    # Register before reading so no write between the two is missed
    queue = await store.watch(path)
    try:
        current = await store.get(path)
    except StoreError:
        await store.publisher.unregister(path, queue)
        raise

    async def event_generator():
        yield DocumentEvent(change_type=ChangeType.SET.value, path=path, data=current).to_sse()
        async for event in store.subscribe(path, queue):
            # Check if client disconnected
            if await request.is_disconnected():
                break
            yield event.to_sse()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        }
    )
