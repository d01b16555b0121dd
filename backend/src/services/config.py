"""Application configuration helpers."""

from __future__ import annotations

from functools import lru_cache
import logging
import os
from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.tags import SortKey, SortOrder

DEFAULT_FILE_EXTENSIONS: Tuple[str, ...] = (".md",)
DEFAULT_EXCLUDE_DIRS: Tuple[str, ...] = (".git", "node_modules")


def _split_csv(value: str | Tuple[str, ...] | list[str]) -> list[str]:
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)
    return [item.strip() for item in items if item and item.strip()]


class AppConfig(BaseModel):
    """Runtime configuration loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    workspace_root: Path = Field(..., description="Directory whose documents are indexed")
    file_extensions: Tuple[str, ...] = Field(
        default=DEFAULT_FILE_EXTENSIONS,
        description="Extensions of documents that are scanned for hashtags",
    )
    exclude_dirs: Tuple[str, ...] = Field(
        default=DEFAULT_EXCLUDE_DIRS,
        description="Directory names skipped during workspace discovery",
    )
    sort_key: SortKey = Field(default=SortKey.NAME, description="sorting.key")
    sort_order: SortOrder = Field(default=SortOrder.ASC, description="sorting.order")
    log_level: str = Field(default="INFO", description="Root logger level")

    @field_validator("workspace_root", mode="before")
    @classmethod
    def _normalize_workspace_root(cls, value: str | Path | None) -> Path:
        if value is None or value == "":
            raise ValueError("HASHTAGS_WORKSPACE_ROOT is required")
        if isinstance(value, Path):
            path = value
        else:
            path = Path(value)
        return path.expanduser().resolve()

    @field_validator("file_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value: str | Tuple[str, ...] | list[str]) -> Tuple[str, ...]:
        extensions = []
        for item in _split_csv(value):
            ext = item.lower()
            if not ext.startswith("."):
                ext = f".{ext}"
            if ext not in extensions:
                extensions.append(ext)
        if not extensions:
            raise ValueError("At least one file extension is required")
        return tuple(extensions)

    @field_validator("exclude_dirs", mode="before")
    @classmethod
    def _normalize_exclude_dirs(cls, value: str | Tuple[str, ...] | list[str]) -> Tuple[str, ...]:
        return tuple(_split_csv(value))

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: Optional[str]) -> str:
        level = (value or "INFO").strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


def _read_env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(key, default)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Load and cache application configuration."""
    workspace_root = _read_env("HASHTAGS_WORKSPACE_ROOT", os.getcwd())
    file_extensions = _read_env("HASHTAGS_FILE_EXTENSIONS", ",".join(DEFAULT_FILE_EXTENSIONS))
    exclude_dirs = _read_env("HASHTAGS_EXCLUDE_DIRS", ",".join(DEFAULT_EXCLUDE_DIRS))
    sort_key = _read_env("HASHTAGS_SORT_KEY", SortKey.NAME.value)
    sort_order = _read_env("HASHTAGS_SORT_ORDER", SortOrder.ASC.value)
    log_level = _read_env("HASHTAGS_LOG_LEVEL", "INFO")

    return AppConfig(
        workspace_root=workspace_root,
        file_extensions=file_extensions,
        exclude_dirs=exclude_dirs,
        sort_key=sort_key,
        sort_order=sort_order,
        log_level=log_level,
    )


def reload_config() -> AppConfig:
    """Clear cached config (useful for tests) and reload."""
    get_config.cache_clear()
    return get_config()


__all__ = ["AppConfig", "get_config", "reload_config"]
