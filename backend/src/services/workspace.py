"""Filesystem access for the documents of a workspace."""

from __future__ import annotations

import logging
from pathlib import Path
import re
from typing import List

from .config import AppConfig, get_config
from .errors import DocumentReadError, DocumentWriteError, EditConflictError

logger = logging.getLogger(__name__)

LINE_BREAK_PATTERN = re.compile(r"(\r\n|\r|\n)")


class WorkspaceService:
    """Discover, read and edit the documents under the workspace root."""

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or get_config()
        self.root = self.config.workspace_root

    def normalize_path(self, path: str | Path) -> str:
        """Resolve ``path`` (relative paths against the root) to the index key."""
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = self.root / candidate
        return str(candidate.resolve())

    def is_excluded(self, path: str | Path) -> bool:
        excluded = set(self.config.exclude_dirs)
        if not excluded:
            return False
        try:
            parts = Path(path).relative_to(self.root).parts
        except ValueError:
            parts = Path(path).parts
        return any(part in excluded for part in parts[:-1])

    def is_document(self, path: str | Path) -> bool:
        """True when ``path`` has a supported extension and is not excluded."""
        suffix = Path(path).suffix.lower()
        return suffix in self.config.file_extensions and not self.is_excluded(path)

    def list_documents(self, folder: str | Path | None = None) -> List[str]:
        """Return every supported document under ``folder`` (default: root)."""
        base = Path(self.normalize_path(folder)) if folder else self.root
        if not base.exists():
            return []
        if base.is_file():
            return [str(base)] if self.is_document(base) else []

        results: List[str] = []
        for extension in self.config.file_extensions:
            for file_path in base.rglob(f"*{extension}"):
                if not file_path.is_file() or self.is_excluded(file_path):
                    continue
                results.append(str(file_path.resolve()))
        return sorted(set(results))

    def read_document(self, path: str | Path) -> str:
        """
        Return the text of a document.

        Raises DocumentReadError when the file is missing, inaccessible or not
        valid UTF-8.
        """
        file_path = Path(path)
        try:
            return file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentReadError(
                f"Cannot read document: {file_path}",
                details={"file_path": str(file_path), "error": str(exc)},
            ) from exc

    def replace_line(self, path: str | Path, line: int, expected_text: str, new_text: str) -> None:
        """
        Replace line ``line`` of a document, keeping its line ending.

        Raises EditConflictError when the line is gone or no longer equals
        ``expected_text``, and DocumentWriteError when the file cannot be
        written back.
        """
        file_path = Path(path)
        try:
            with file_path.open("r", encoding="utf-8", newline="") as handle:
                raw = handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentReadError(
                f"Cannot read document: {file_path}",
                details={"file_path": str(file_path), "error": str(exc)},
            ) from exc

        # Even indexes hold line text, odd indexes the separators.
        pieces = LINE_BREAK_PATTERN.split(raw)
        index = line * 2
        if line < 0 or index >= len(pieces):
            raise EditConflictError(
                f"Line {line} no longer exists in {file_path}",
                details={"file_path": str(file_path), "line": line},
            )
        if pieces[index] != expected_text:
            raise EditConflictError(
                f"Line {line} of {file_path} changed since the rename was planned",
                details={
                    "file_path": str(file_path),
                    "line": line,
                    "expected": expected_text,
                    "actual": pieces[index],
                },
            )

        pieces[index] = new_text
        try:
            with file_path.open("w", encoding="utf-8", newline="") as handle:
                handle.write("".join(pieces))
        except OSError as exc:
            raise DocumentWriteError(
                f"Cannot write document: {file_path}",
                details={"file_path": str(file_path), "error": str(exc)},
            ) from exc
        logger.debug("Line replaced", extra={"file_path": str(file_path), "line": line})


__all__ = ["WorkspaceService"]
