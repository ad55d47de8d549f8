"""
Blobs API

Public reads of stored blobs, so avatar URLs handed out on upload can be
loaded by any viewer. Mounted under the configured blob URL prefix.
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from ..store import BlobStore
from .deps import get_blobs

router = APIRouter(tags=["blobs"])


@router.get("/{key:path}")
async def get_blob(key: str, blobs: BlobStore = Depends(get_blobs)):
    data = await blobs.read(key)
    if data is None:
        raise HTTPException(status_code=404, detail="File not found.")
    return Response(
        content=data,
        media_type="application/octet-stream",
        headers={"Cache-Control": "no-cache"},
    )
