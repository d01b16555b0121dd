"""Planning and applying hashtag renames."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Dict, List, Mapping, Sequence

from ..models.tags import FileTagRecord, RenameEdit, RenameResult, SkippedEdit, TagOccurrence
from .errors import DocumentReadError, DocumentWriteError, EditConflictError, TagValidationError
from .tag_parser import RESERVED_CHARS, is_valid_segment
from .workspace import WorkspaceService

logger = logging.getLogger(__name__)


def validate_tag_name(name: str) -> str:
    """
    Check that ``name`` can be used as a single tag segment.

    Raises TagValidationError describing the first rule that fails.
    """
    if not name:
        raise TagValidationError("Tag name cannot be empty")
    if any(char.isspace() for char in name):
        raise TagValidationError("Tag name cannot contain spaces", details={"name": name})
    if any(char in RESERVED_CHARS for char in name):
        raise TagValidationError(
            "Tag name cannot contain special characters", details={"name": name}
        )
    if not is_valid_segment(name):
        raise TagValidationError(
            "Tag name may only contain letters, digits, '_' and '-'", details={"name": name}
        )
    return name


def _render(path: Sequence[str]) -> str:
    return "#" + "/".join(path)


class RenameOperator:
    """Turn a rename request into line edits and apply them."""

    def __init__(self, workspace: WorkspaceService) -> None:
        self.workspace = workspace

    async def plan_rename(
        self,
        snapshot: Mapping[str, FileTagRecord],
        old_path: Sequence[str],
        new_name: str,
    ) -> List[RenameEdit]:
        """
        Compute the edits that rename the last segment of ``old_path``.

        Only occurrences of exactly ``old_path`` are rewritten; tags nested
        beneath it keep their old prefix. Occurrences sharing a line collapse
        into one edit. A location whose text no longer reads as the old tag
        is left alone.
        """
        validate_tag_name(new_name)
        old_path = tuple(old_path)
        if not old_path or old_path[-1] == new_name:
            return []

        old_tag = _render(old_path)
        new_tag = _render((*old_path[:-1], new_name))

        matches: Dict[str, Dict[int, List[TagOccurrence]]] = defaultdict(lambda: defaultdict(list))
        for file_path in sorted(snapshot):
            for occurrence in snapshot[file_path].occurrences:
                if tuple(occurrence.path) == old_path:
                    matches[file_path][occurrence.range.start.line].append(occurrence)

        edits: List[RenameEdit] = []
        for file_path, lines in matches.items():
            try:
                text = await asyncio.to_thread(self.workspace.read_document, file_path)
            except DocumentReadError as exc:
                logger.warning(
                    "Skipping unreadable document during rename",
                    extra={"file_path": file_path, "error": exc.details.get("error", exc.message)},
                )
                continue

            document_lines = text.split("\n")
            for line_number in sorted(lines):
                if line_number >= len(document_lines):
                    continue
                line_text = document_lines[line_number]
                new_line_text = line_text
                # Right to left so earlier columns stay valid.
                for occurrence in sorted(
                    lines[line_number], key=lambda item: item.range.start.character, reverse=True
                ):
                    start = occurrence.range.start.character
                    end = occurrence.range.end.character
                    if new_line_text[start:end] != old_tag:
                        continue
                    new_line_text = new_line_text[:start] + new_tag + new_line_text[end:]
                if new_line_text != line_text:
                    edits.append(
                        RenameEdit(
                            file_path=file_path,
                            line=line_number,
                            old_line_text=line_text,
                            new_line_text=new_line_text,
                        )
                    )

        logger.info(
            "Rename planned",
            extra={"old_tag": old_tag, "new_tag": new_tag, "edits": len(edits)},
        )
        return edits

    async def apply_rename(
        self, edits: Sequence[RenameEdit], old_tag: str = "", new_tag: str = ""
    ) -> RenameResult:
        """Apply ``edits`` one by one; conflicts are skipped, not fatal."""
        result = RenameResult(old_tag=old_tag, new_tag=new_tag)
        for edit in edits:
            try:
                await asyncio.to_thread(
                    self.workspace.replace_line,
                    edit.file_path,
                    edit.line,
                    edit.old_line_text,
                    edit.new_line_text,
                )
            except (EditConflictError, DocumentReadError, DocumentWriteError) as exc:
                logger.warning(
                    "Rename edit skipped",
                    extra={"file_path": edit.file_path, "line": edit.line, "reason": exc.message},
                )
                result.skipped.append(SkippedEdit(edit=edit, reason=exc.message))
                continue
            result.applied.append(edit)
        return result


__all__ = ["RenameOperator", "validate_tag_name"]
