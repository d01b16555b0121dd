"""Hashtag extraction from document text."""

from __future__ import annotations

import re
from typing import List

from ..models.tags import Position, TagOccurrence, TagRange

# Characters that may never appear inside a tag segment.
RESERVED_CHARS = frozenset("!@#$%^&*()=+,[{]};:'\"?><")
SEGMENT_PATTERN = re.compile(r"[\w-]+")
TAG_PATTERN = re.compile(r"#(?P<path>[\w-]+(?:/[\w-]+)*)")


def is_valid_segment(segment: str) -> bool:
    """Return True when ``segment`` is a complete tag segment."""
    return bool(segment) and SEGMENT_PATTERN.fullmatch(segment) is not None


def split_tag(tag: str) -> List[str]:
    """
    Split ``#a/b/c`` or ``a/b/c`` into its segments.

    Empty segments (leading, trailing or doubled slashes) are dropped.
    """
    text = (tag or "").strip()
    if text.startswith("#"):
        text = text[1:]
    return [segment for segment in text.split("/") if segment]


def parse_tags(text: str, file_path: str = "") -> List[TagOccurrence]:
    """
    Extract every hashtag occurrence from ``text`` in source order.

    A tag is ``#`` followed by one or more word segments joined by ``/``; it
    ends at the first whitespace, reserved character or end of line. A
    trailing ``/`` is not part of the tag. URLs, code spans and links are not
    special-cased.
    """
    occurrences: List[TagOccurrence] = []
    if not text:
        return occurrences

    for line_number, line in enumerate(text.split("\n")):
        if "#" not in line:
            continue
        for match in TAG_PATTERN.finditer(line):
            occurrences.append(
                TagOccurrence(
                    path=tuple(match.group("path").split("/")),
                    file_path=file_path,
                    range=TagRange(
                        start=Position(line=line_number, character=match.start()),
                        end=Position(line=line_number, character=match.end()),
                    ),
                )
            )
    return occurrences


__all__ = [
    "RESERVED_CHARS",
    "SEGMENT_PATTERN",
    "TAG_PATTERN",
    "is_valid_segment",
    "parse_tags",
    "split_tag",
]
