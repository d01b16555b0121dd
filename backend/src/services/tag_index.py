"""In-memory store of the tags found in each file."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

from ..models.tags import FileTagRecord

logger = logging.getLogger(__name__)

TagSnapshot = Mapping[str, FileTagRecord]


class TagIndex:
    """
    Flat mapping from file path to ``FileTagRecord``.

    Holds at most one record per path and knows nothing about tree shape or
    ordering. Readers only ever receive snapshots.
    """

    def __init__(self, records: Iterable[FileTagRecord] | None = None) -> None:
        self._records: Dict[str, FileTagRecord] = {}
        for record in records or ():
            self._records[record.file_path] = record

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, file_path: object) -> bool:
        return file_path in self._records

    def get(self, file_path: str) -> Optional[FileTagRecord]:
        return self._records.get(file_path)

    def upsert(self, record: FileTagRecord) -> None:
        """Insert or replace the record for ``record.file_path``."""
        self._records[record.file_path] = record

    def remove(self, file_path: str) -> bool:
        """Drop a file's record; returns False when it was not indexed."""
        return self._records.pop(file_path, None) is not None

    def replace_all(self, records: Mapping[str, FileTagRecord]) -> None:
        """Swap in a completely rebuilt mapping."""
        self._records = dict(records)
        logger.debug("Tag index replaced", extra={"files": len(self._records)})

    def clear(self) -> None:
        self._records = {}

    def file_paths(self) -> list[str]:
        return list(self._records)

    def snapshot(self) -> TagSnapshot:
        """Return a read-only, point-in-time view of the index."""
        return MappingProxyType(dict(self._records))


__all__ = ["TagIndex", "TagSnapshot"]
