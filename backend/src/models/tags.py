"""Hashtag index models."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class SortKey(str, Enum):
    """Sibling ordering used by the tag tree."""

    NAME = "name"
    COUNT_FILES = "countFiles"
    COUNT_TAGS = "countTags"


class SortOrder(str, Enum):
    """Direction applied at every tree level."""

    ASC = "asc"
    DESC = "desc"


class ScanReason(str, Enum):
    """Why the scanner is being invoked."""

    WORKSPACE = "forWorkspace"
    FILE_CREATED_OR_UPDATED = "forFileCreatedOrUpdated"
    FILE_DELETED = "forFileDeleted"
    FILE_RENAMED = "forFileRenamed"
    JUST_GET = "justGet"


class Position(BaseModel):
    """Zero-based line/character position."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(..., ge=0)
    character: int = Field(..., ge=0)


class TagRange(BaseModel):
    """Source span of a tag, `#` included, end exclusive."""

    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position


class TagOccurrence(BaseModel):
    """One appearance of a tag path in one document."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "path": ["project", "alpha", "todo"],
                "file_path": "/workspace/notes.md",
                "range": {
                    "start": {"line": 3, "character": 4},
                    "end": {"line": 3, "character": 23},
                },
            }
        },
    )

    path: Tuple[str, ...] = Field(..., min_length=1, description="Tag segments, root first")
    file_path: str = Field(default="", description="Owning document")
    range: TagRange

    @property
    def tag(self) -> str:
        return "/".join(self.path)


class FileTagRecord(BaseModel):
    """All occurrences found in a single file."""

    model_config = ConfigDict(frozen=True)

    file_path: str
    occurrences: Tuple[TagOccurrence, ...] = ()


class TagLocation(BaseModel):
    """Where a tag path occurs."""

    model_config = ConfigDict(frozen=True)

    file_path: str
    range: TagRange


class TagNode(BaseModel):
    """Node of the derived tag hierarchy (the root has an empty name)."""

    name: str = ""
    parent_path: List[str] = Field(default_factory=list)
    children: Dict[str, "TagNode"] = Field(default_factory=dict)
    file_count: int = Field(default=0, ge=0, description="Distinct files at or below this node")
    tag_count: int = Field(default=0, ge=0, description="Distinct tag paths at or below this node")
    locations: List[TagLocation] = Field(
        default_factory=list, description="Occurrences of exactly this path"
    )

    @property
    def full_path(self) -> List[str]:
        if not self.name:
            return list(self.parent_path)
        return [*self.parent_path, self.name]


class TagCompletion(BaseModel):
    """Next-segment candidate for a partially typed tag."""

    name: str
    full_path: List[str]
    file_count: int
    tag_count: int


class RenameEdit(BaseModel):
    """Whole-line replacement produced by a rename plan."""

    model_config = ConfigDict(frozen=True)

    file_path: str
    line: int = Field(..., ge=0)
    old_line_text: str
    new_line_text: str


class SkippedEdit(BaseModel):
    """Edit that was not applied, with the reason."""

    edit: RenameEdit
    reason: str


class RenameResult(BaseModel):
    """Outcome of a rename request."""

    old_tag: str
    new_tag: str
    applied: List[RenameEdit] = Field(default_factory=list)
    skipped: List[SkippedEdit] = Field(default_factory=list)


class WorkspaceEventKind(str, Enum):
    """Change notifications delivered by the host."""

    SAVED = "saved"
    CREATED = "created"
    DELETED = "deleted"
    RENAMED = "renamed"
    CONFIGURATION_CHANGED = "configurationChanged"
    REFRESH = "refresh"


class WorkspaceEvent(BaseModel):
    """A discrete, reason-tagged update request."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "kind": "renamed",
                "paths": ["notes/new-name.md"],
                "old_paths": ["notes/old-name.md"],
            }
        }
    )

    kind: WorkspaceEventKind
    paths: List[str] = Field(default_factory=list, description="Affected (or new) paths")
    old_paths: List[str] = Field(
        default_factory=list, description="Previous paths for rename events"
    )


class ScanSummary(BaseModel):
    """Index state after a scan."""

    reason: ScanReason
    files_indexed: int = Field(..., ge=0)
    occurrences: int = Field(..., ge=0)


class SortingSettings(BaseModel):
    """Active tree ordering."""

    key: SortKey = SortKey.NAME
    order: SortOrder = SortOrder.ASC


class SortingUpdate(BaseModel):
    """Partial update of the tree ordering."""

    key: Optional[SortKey] = None
    order: Optional[SortOrder] = None


class RenameRequest(BaseModel):
    """Rename the leaf segment of a tag."""

    tag: str = Field(..., min_length=1, description="Full tag path, e.g. 'project/alpha'")
    new_name: str = Field(..., description="Replacement for the last segment")


TagNode.model_rebuild()


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
    "WorkspaceEventKind",
    "WorkspaceEvent",
    "ScanSummary",
    "SortingSettings",
    "SortingUpdate",
    "RenameRequest",
]
