"""Feed routes."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from ..schemas import FeedPageResponse, PostResponse
from ..services import FeedAssembler, FeedPage
from .dependencies import get_feed_assembler, get_viewer_id

router = APIRouter(prefix="/feed", tags=["feed"])


def _page_response(page: FeedPage) -> FeedPageResponse:
    return FeedPageResponse(
        items=[PostResponse.model_validate(item) for item in page.items],
        next_cursor=page.next_cursor,
    )


@router.get("/", response_model=FeedPageResponse)
async def feed_endpoint(
    cursor: str | None = Query(default=None),
    limit: int | None = Query(default=None),
    viewer_id: UUID | None = Depends(get_viewer_id),
    feed: FeedAssembler = Depends(get_feed_assembler),
) -> FeedPageResponse:
    return _page_response(feed.assemble(viewer_id, cursor=cursor, page_size=limit))


@router.get("/users/{user_id}", response_model=FeedPageResponse)
async def user_timeline_endpoint(
    user_id: UUID,
    cursor: str | None = Query(default=None),
    limit: int | None = Query(default=None),
    viewer_id: UUID | None = Depends(get_viewer_id),
    feed: FeedAssembler = Depends(get_feed_assembler),
) -> FeedPageResponse:
    """Posts owned by one user, filtered by what the viewer may see."""

    return _page_response(feed.assemble(viewer_id, cursor=cursor, page_size=limit, author_id=user_id))
