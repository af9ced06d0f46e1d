"""Media attachment routes backed by DigitalOcean Spaces."""
from __future__ import annotations

import asyncio
from uuid import UUID

from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from ..schemas import (
    MediaListResponse,
    MediaRefCreate,
    MediaResponse,
    MediaUploadItemResult,
    MediaUploadResponse,
)
from ..services import FeedAssembler, MediaAttachmentManager, MediaUpload, ObjectRef
from .dependencies import get_current_user_id, get_feed_assembler, get_media_manager, get_viewer_id

router = APIRouter(tags=["media"])


@router.get("/posts/{post_id}/media", response_model=MediaListResponse)
async def list_media_endpoint(
    post_id: UUID,
    viewer_id: UUID | None = Depends(get_viewer_id),
    feed: FeedAssembler = Depends(get_feed_assembler),
    manager: MediaAttachmentManager = Depends(get_media_manager),
) -> MediaListResponse:
    feed.ensure_visible(post_id, viewer_id)
    return MediaListResponse(items=[MediaResponse.model_validate(item) for item in manager.list_media(post_id)])


@router.post("/posts/{post_id}/media", response_model=MediaUploadResponse)
async def upload_media_endpoint(
    post_id: UUID,
    files: list[UploadFile] = File(...),
    user_id: UUID = Depends(get_current_user_id),
    manager: MediaAttachmentManager = Depends(get_media_manager),
) -> MediaUploadResponse:
    """Upload several files at once; each item reports its own outcome."""

    items = [
        MediaUpload(filename=upload.filename, content_type=upload.content_type, data=await upload.read())
        for upload in files
    ]
    results = await asyncio.to_thread(manager.upload_and_attach, post_id, user_id, items)

    response = MediaUploadResponse(
        items=[
            MediaUploadItemResult(
                index=result.index,
                filename=result.filename,
                ok=result.ok,
                media=MediaResponse.model_validate(result.media) if result.media is not None else None,
                error=result.error,
                detail=result.message,
            )
            for result in results
        ]
    )
    response.attached = sum(1 for item in response.items if item.ok)
    response.failed = len(response.items) - response.attached
    return response


@router.post("/posts/{post_id}/media/refs", response_model=MediaResponse, status_code=status.HTTP_201_CREATED)
async def attach_media_ref_endpoint(
    post_id: UUID,
    payload: MediaRefCreate,
    user_id: UUID = Depends(get_current_user_id),
    manager: MediaAttachmentManager = Depends(get_media_manager),
) -> MediaResponse:
    ref: ObjectRef | str = ObjectRef(key=payload.object_key, url=payload.url) if payload.object_key else payload.url
    media = manager.attach(post_id, user_id, ref, payload.kind)
    return MediaResponse.model_validate(media)


@router.delete("/media/{media_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_media_endpoint(
    media_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    manager: MediaAttachmentManager = Depends(get_media_manager),
) -> Response:
    manager.remove(media_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
