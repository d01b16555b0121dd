"""Exceptions raised by the hashtag services."""

from __future__ import annotations

from typing import Any, Dict, Optional


class HashtagError(Exception):
    """Base class for hashtag index failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DocumentReadError(HashtagError):
    """Raised when a document no longer exists or cannot be read."""


class TagValidationError(HashtagError):
    """Raised when a proposed tag name is not a valid tag segment."""


class EditConflictError(HashtagError):
    """Raised when a line no longer holds the text an edit expects."""


class DocumentWriteError(HashtagError):
    """Raised when an edited document cannot be written back."""


__all__ = [
    "HashtagError",
    "DocumentReadError",
    "DocumentWriteError",
    "TagValidationError",
    "EditConflictError",
]
