"""HashtagService - the tag index as seen by editors and agents.

This service handles:
- Initial and on-demand workspace scans
- Dispatch of file-change events to scan reasons
- Tree, completion and reference queries
- Tag renames (plan, apply, rescan)
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from ..models.tags import (
    RenameResult,
    ScanReason,
    ScanSummary,
    SortKey,
    SortingSettings,
    SortOrder,
    TagCompletion,
    TagLocation,
    TagNode,
    WorkspaceEvent,
    WorkspaceEventKind,
)
from .config import AppConfig, get_config
from .errors import TagValidationError
from .rename import RenameOperator, validate_tag_name
from .scanner import WorkspaceScanner
from .tag_index import TagIndex
from .tag_parser import split_tag
from .tag_tree import build_tag_tree, complete_tag, find_references
from .workspace import WorkspaceService

logger = logging.getLogger(__name__)

EVENT_REASONS = {
    WorkspaceEventKind.SAVED: ScanReason.FILE_CREATED_OR_UPDATED,
    WorkspaceEventKind.CREATED: ScanReason.FILE_CREATED_OR_UPDATED,
    WorkspaceEventKind.DELETED: ScanReason.FILE_DELETED,
    WorkspaceEventKind.RENAMED: ScanReason.FILE_RENAMED,
    WorkspaceEventKind.CONFIGURATION_CHANGED: ScanReason.WORKSPACE,
    WorkspaceEventKind.REFRESH: ScanReason.WORKSPACE,
}


class HashtagService:
    """Owns one tag index and everything that reads or writes it."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        workspace: Optional[WorkspaceService] = None,
        index: Optional[TagIndex] = None,
    ) -> None:
        """Initialize the service.

        Args:
            config: Application config. Loaded from the environment if not provided.
            workspace: Document access. Built from ``config`` if not provided.
            index: Tag index. Starts empty if not provided.
        """
        self.config = config or get_config()
        self.workspace = workspace or WorkspaceService(self.config)
        self.index = index if index is not None else TagIndex()
        self.scanner = WorkspaceScanner(self.index, self.workspace)
        self.renamer = RenameOperator(self.workspace)
        self.sorting = SortingSettings(key=self.config.sort_key, order=self.config.sort_order)
        self.initialized = False
        self._lock = asyncio.Lock()

    # ========================================
    # Scanning
    # ========================================

    async def initialize(self) -> ScanSummary:
        """Run the initial full workspace scan."""
        return await self.scan(ScanReason.WORKSPACE)

    async def scan(
        self,
        reason: ScanReason,
        paths: Optional[List[str]] = None,
        old_paths: Optional[List[str]] = None,
    ) -> ScanSummary:
        """Run one scan step; steps never interleave."""
        async with self._lock:
            await self.scanner.scan(reason, paths, old_paths)
            if reason is ScanReason.WORKSPACE:
                self.initialized = True
        return self._summary(reason)

    async def handle_event(self, event: WorkspaceEvent) -> ScanSummary:
        """Map a host notification to exactly one scan reason."""
        reason = EVENT_REASONS[event.kind]
        logger.debug(
            "Workspace event received",
            extra={"kind": event.kind.value, "reason": reason.value, "paths": len(event.paths)},
        )
        if reason is ScanReason.FILE_RENAMED:
            return await self.scan(reason, event.paths, event.old_paths)
        return await self.scan(reason, event.paths)

    def _summary(self, reason: ScanReason) -> ScanSummary:
        snapshot = self.index.snapshot()
        return ScanSummary(
            reason=reason,
            files_indexed=len(snapshot),
            occurrences=sum(len(record.occurrences) for record in snapshot.values()),
        )

    # ========================================
    # Queries
    # ========================================

    def get_tree(
        self,
        sort_key: Optional[SortKey] = None,
        sort_order: Optional[SortOrder] = None,
    ) -> TagNode:
        """Build the tag tree for the active (or given) ordering."""
        return build_tag_tree(
            self.index.snapshot(),
            sort_key or self.sorting.key,
            sort_order or self.sorting.order,
        )

    def set_sorting(
        self, key: Optional[SortKey] = None, order: Optional[SortOrder] = None
    ) -> SortingSettings:
        """Change the ordering used by later tree queries (not persisted)."""
        self.sorting = SortingSettings(
            key=key or self.sorting.key,
            order=order or self.sorting.order,
        )
        logger.info(
            "Tag sorting updated",
            extra={"sort_key": self.sorting.key.value, "sort_order": self.sorting.order.value},
        )
        return self.sorting

    def complete(self, prefix: str) -> List[TagCompletion]:
        return complete_tag(self.get_tree(), prefix)

    def references(self, tag: str, include_descendants: bool = False) -> List[TagLocation]:
        return find_references(self.get_tree(), split_tag(tag), include_descendants)

    # ========================================
    # Rename
    # ========================================

    async def rename_tag(self, tag: str, new_name: str) -> RenameResult:
        """
        Rename the last segment of ``tag`` everywhere it occurs.

        Nested tags (``tag/child``) are not touched. After the edits are
        applied the whole workspace is rescanned.

        Raises:
            TagValidationError: ``new_name`` is not a valid segment or ``tag`` is empty
        """
        validate_tag_name(new_name)
        old_path = split_tag(tag)
        if not old_path:
            raise TagValidationError("Tag to rename cannot be empty", details={"tag": tag})

        old_tag = "#" + "/".join(old_path)
        new_tag = "#" + "/".join([*old_path[:-1], new_name])
        if old_path[-1] == new_name:
            return RenameResult(old_tag=old_tag, new_tag=new_tag)

        async with self._lock:
            try:
                edits = await self.renamer.plan_rename(self.index.snapshot(), old_path, new_name)
                result = await self.renamer.apply_rename(edits, old_tag=old_tag, new_tag=new_tag)
            finally:
                await self.scanner.scan(ScanReason.WORKSPACE)
                self.initialized = True

        logger.info(
            "Tag renamed",
            extra={
                "old_tag": old_tag,
                "new_tag": new_tag,
                "applied": len(result.applied),
                "skipped": len(result.skipped),
            },
        )
        return result


# ========================================
# Singleton Pattern
# ========================================

_hashtag_service: Optional[HashtagService] = None


def get_hashtag_service() -> HashtagService:
    """Get or create the HashtagService singleton."""
    global _hashtag_service
    if _hashtag_service is None:
        _hashtag_service = HashtagService()
    return _hashtag_service


__all__ = ["HashtagService", "EVENT_REASONS", "get_hashtag_service"]
