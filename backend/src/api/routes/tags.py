"""HTTP API routes for hashtag queries, events and renames."""

from __future__ import annotations

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query

from ...models.tags import (
    RenameRequest,
    RenameResult,
    ScanReason,
    ScanSummary,
    SortingSettings,
    SortingUpdate,
    SortKey,
    SortOrder,
    TagCompletion,
    TagLocation,
    TagNode,
    WorkspaceEvent,
)
from ...services.hashtags import HashtagService, get_hashtag_service

router = APIRouter()

HashtagServiceDep = Annotated[HashtagService, Depends(get_hashtag_service)]


@router.get("/api/tags/tree", response_model=TagNode)
async def get_tag_tree(
    service: HashtagServiceDep,
    sort_key: Optional[SortKey] = Query(None, description="Override sorting.key"),
    sort_order: Optional[SortOrder] = Query(None, description="Override sorting.order"),
):
    """Return the tag hierarchy with per-node counts."""
    return service.get_tree(sort_key, sort_order)


@router.get("/api/tags/complete", response_model=list[TagCompletion])
async def complete_tag(
    service: HashtagServiceDep,
    prefix: str = Query(
        "",
        max_length=1024,
        description="Typed tag text, e.g. '#work/'; text after the last '/' is not used to filter",
    ),
):
    """List every child of the node named by the complete segments of ``prefix``."""
    return service.complete(prefix)


@router.get("/api/tags/references", response_model=list[TagLocation])
async def find_tag_references(
    service: HashtagServiceDep,
    tag: str = Query(..., min_length=1, max_length=1024),
    include_descendants: bool = Query(False),
) -> List[TagLocation]:
    """Return every location of a tag."""
    return service.references(tag, include_descendants)


@router.post("/api/tags/rename", response_model=RenameResult)
async def rename_tag(request: RenameRequest, service: HashtagServiceDep):
    """Rename the last segment of a tag in every file that uses it."""
    return await service.rename_tag(request.tag, request.new_name)


@router.post("/api/tags/events", response_model=ScanSummary)
async def handle_workspace_event(event: WorkspaceEvent, service: HashtagServiceDep):
    """Apply a file-change notification to the index."""
    return await service.handle_event(event)


@router.post("/api/tags/rescan", response_model=ScanSummary)
async def rescan_workspace(service: HashtagServiceDep):
    """Rebuild the index from every document in the workspace."""
    return await service.scan(ScanReason.WORKSPACE)


@router.get("/api/tags/sorting", response_model=SortingSettings)
async def get_sorting(service: HashtagServiceDep):
    """Return the active tree ordering."""
    return service.sorting


@router.put("/api/tags/sorting", response_model=SortingSettings)
async def update_sorting(update: SortingUpdate, service: HashtagServiceDep):
    """Change the tree ordering for subsequent queries."""
    return service.set_sorting(update.key, update.order)


__all__ = ["router"]
