from pathlib import Path
from typing import Callable

import pytest

from backend.src.services.config import AppConfig


@pytest.fixture
def workspace_config(tmp_path: Path) -> AppConfig:
    root = tmp_path / "workspace"
    root.mkdir()
    return AppConfig(workspace_root=root)


@pytest.fixture
def write_doc(workspace_config: AppConfig) -> Callable[[str, str], str]:
    """Write a document under the workspace root and return its index key."""

    def _write(relative_path: str, text: str) -> str:
        path = workspace_config.workspace_root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return str(path.resolve())

    return _write
