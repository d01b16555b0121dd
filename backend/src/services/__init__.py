"""Service layer for the hashtag index and its workspace integration."""

from .config import AppConfig, get_config, reload_config
from .errors import (
    DocumentReadError,
    DocumentWriteError,
    EditConflictError,
    HashtagError,
    TagValidationError,
)
from .hashtags import HashtagService, get_hashtag_service
from .rename import RenameOperator, validate_tag_name
from .scanner import WorkspaceScanner
from .tag_index import TagIndex, TagSnapshot
from .tag_parser import parse_tags, split_tag
from .tag_tree import build_tag_tree, complete_tag, find_node, find_references
from .workspace import WorkspaceService

__all__ = [
    "AppConfig",
    "get_config",
    "reload_config",
    "HashtagError",
    "DocumentReadError",
    "DocumentWriteError",
    "EditConflictError",
    "TagValidationError",
    "HashtagService",
    "get_hashtag_service",
    "RenameOperator",
    "validate_tag_name",
    "WorkspaceScanner",
    "TagIndex",
    "TagSnapshot",
    "parse_tags",
    "split_tag",
    "build_tag_tree",
    "complete_tag",
    "find_node",
    "find_references",
    "WorkspaceService",
]
