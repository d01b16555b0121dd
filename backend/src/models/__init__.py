"""Pydantic models for data validation and serialization."""

from .tags import (
    FileTagRecord,
    Position,
    RenameEdit,
    RenameRequest,
    RenameResult,
    ScanReason,
    ScanSummary,
    SkippedEdit,
    SortingSettings,
    SortingUpdate,
    SortKey,
    SortOrder,
    TagCompletion,
    TagLocation,
    TagNode,
    TagOccurrence,
    TagRange,
    WorkspaceEvent,
    WorkspaceEventKind,
)

__all__ = [
    "SortKey",
    "SortOrder",
    "ScanReason",
    "Position",
    "TagRange",
    "TagOccurrence",
    "FileTagRecord",
    "TagLocation",
    "TagNode",
    "TagCompletion",
    "RenameEdit",
    "SkippedEdit",
    "RenameResult",
    "RenameRequest",
    "WorkspaceEventKind",
    "WorkspaceEvent",
    "ScanSummary",
    "SortingSettings",
    "SortingUpdate",
]
