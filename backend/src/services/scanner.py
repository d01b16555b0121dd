"""Keeps the tag index in step with the documents of the workspace."""

from __future__ import annotations

import asyncio
from itertools import zip_longest
import logging
import os
from pathlib import Path
import time
from typing import Dict, List, Optional, Sequence

from ..models.tags import FileTagRecord, ScanReason
from .errors import DocumentReadError
from .tag_index import TagIndex
from .tag_parser import parse_tags
from .workspace import WorkspaceService

logger = logging.getLogger(__name__)


class WorkspaceScanner:
    """Apply scan requests to a single, shared ``TagIndex``."""

    def __init__(self, index: TagIndex, workspace: WorkspaceService) -> None:
        self.index = index
        self.workspace = workspace

    async def scan(
        self,
        reason: ScanReason,
        changed_paths: Sequence[str] | None = None,
        old_paths: Sequence[str] | None = None,
    ) -> TagIndex:
        """
        Update the index for ``reason`` and return it.

        Args:
            reason: Which policy to apply
            changed_paths: Created, updated, deleted or renamed-to paths
            old_paths: Renamed-from paths, paired positionally with ``changed_paths``

        Returns:
            The shared index instance (never a copy)
        """
        reason = ScanReason(reason)
        if reason is ScanReason.JUST_GET:
            return self.index

        start_time = time.time()
        changed = list(changed_paths or [])
        touched = 0

        if reason is ScanReason.WORKSPACE:
            touched = await self._scan_workspace()
        elif reason is ScanReason.FILE_CREATED_OR_UPDATED:
            touched = await self._scan_paths(changed)
        elif reason is ScanReason.FILE_DELETED:
            touched = self._remove_paths(changed)
        elif reason is ScanReason.FILE_RENAMED:
            touched = await self._rename_paths(list(old_paths or []), changed)

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "Tag scan completed",
            extra={
                "reason": reason.value,
                "files_touched": touched,
                "files_indexed": len(self.index),
                "duration_ms": f"{duration_ms:.2f}",
            },
        )
        return self.index

    async def scan_file(self, path: str) -> Optional[FileTagRecord]:
        """Read and parse one document; ``None`` when it cannot be read."""
        try:
            text = await asyncio.to_thread(self.workspace.read_document, path)
        except DocumentReadError as exc:
            logger.warning(
                "Skipping unreadable document",
                extra={"file_path": path, "error": exc.details.get("error", exc.message)},
            )
            return None
        return FileTagRecord(file_path=path, occurrences=tuple(parse_tags(text, path)))

    async def _scan_workspace(self) -> int:
        documents = await asyncio.to_thread(self.workspace.list_documents)
        records: Dict[str, FileTagRecord] = {}
        for path in documents:
            record = await self.scan_file(path)
            if record is not None:
                records[path] = record
        self.index.replace_all(records)
        return len(documents)

    async def _scan_paths(self, paths: Sequence[str]) -> int:
        touched = 0
        for path in await self._expand_paths(paths):
            record = await self.scan_file(path)
            if record is None:
                self.index.remove(path)
            else:
                self.index.upsert(record)
            touched += 1
        return touched

    def _remove_paths(self, paths: Sequence[str]) -> int:
        removed = 0
        for raw_path in paths:
            path = self.workspace.normalize_path(raw_path)
            prefix = path.rstrip(os.sep) + os.sep
            for indexed in self.index.file_paths():
                if indexed == path or indexed.startswith(prefix):
                    self.index.remove(indexed)
                    removed += 1
        return removed

    async def _rename_paths(self, old_paths: List[str], new_paths: List[str]) -> int:
        if len(old_paths) != len(new_paths):
            logger.warning(
                "Rename event with unequal path lists",
                extra={"old_count": len(old_paths), "new_count": len(new_paths)},
            )
        for old_path, new_path in zip_longest(old_paths, new_paths):
            logger.debug("File renamed", extra={"old_path": old_path, "new_path": new_path})

        # Unmatched old paths behave as deletions, unmatched new paths as creations.
        removed = self._remove_paths(old_paths)
        scanned = await self._scan_paths(new_paths)
        return removed + scanned

    async def _expand_paths(self, paths: Sequence[str]) -> List[str]:
        expanded: List[str] = []
        for raw_path in paths:
            path = self.workspace.normalize_path(raw_path)
            if Path(path).is_dir():
                expanded.extend(await asyncio.to_thread(self.workspace.list_documents, path))
            elif self.workspace.is_document(path):
                expanded.append(path)
            else:
                logger.debug("Ignoring non-document path", extra={"file_path": path})
        return list(dict.fromkeys(expanded))


__all__ = ["WorkspaceScanner"]
