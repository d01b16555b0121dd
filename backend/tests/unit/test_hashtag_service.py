from pathlib import Path

import pytest

from backend.src.models.tags import (
    ScanReason,
    SortKey,
    SortOrder,
    WorkspaceEvent,
    WorkspaceEventKind,
)
from backend.src.services.config import AppConfig
from backend.src.services.errors import TagValidationError
from backend.src.services.hashtags import EVENT_REASONS, HashtagService


@pytest.fixture
def service(workspace_config: AppConfig) -> HashtagService:
    return HashtagService(config=workspace_config)


def _all_paths(service: HashtagService) -> set:
    return {
        occurrence.path
        for record in service.index.snapshot().values()
        for occurrence in record.occurrences
    }


def test_every_event_kind_maps_to_one_reason() -> None:
    assert set(EVENT_REASONS) == set(WorkspaceEventKind)
    assert EVENT_REASONS[WorkspaceEventKind.SAVED] is ScanReason.FILE_CREATED_OR_UPDATED
    assert EVENT_REASONS[WorkspaceEventKind.RENAMED] is ScanReason.FILE_RENAMED
    assert EVENT_REASONS[WorkspaceEventKind.REFRESH] is ScanReason.WORKSPACE


@pytest.mark.asyncio
async def test_initialize_builds_expected_tree(service, write_doc) -> None:
    write_doc("notes.md", "#work/urgent fix this\n#work/later")
    write_doc("todo.md", "#work/urgent also here")

    summary = await service.initialize()

    assert summary.reason is ScanReason.WORKSPACE
    assert summary.files_indexed == 2
    assert summary.occurrences == 3
    work = service.get_tree().children["work"]
    assert (work.tag_count, work.file_count) == (2, 2)
    assert work.children["urgent"].file_count == 2
    assert len(work.children["urgent"].locations) == 2
    assert work.children["later"].file_count == 1
    assert len(work.children["later"].locations) == 1


@pytest.mark.asyncio
async def test_deleted_event_purges_file_from_tree(service, write_doc) -> None:
    notes = write_doc("notes.md", "#work/urgent\n#work/later")
    write_doc("todo.md", "#work/urgent")
    await service.initialize()
    Path(notes).unlink()

    await service.handle_event(WorkspaceEvent(kind=WorkspaceEventKind.DELETED, paths=[notes]))

    assert service.index.get(notes) is None
    tree = service.get_tree()
    work = tree.children["work"]
    assert "later" not in work.children
    assert work.file_count == 1
    assert all(loc.file_path != notes for loc in work.children["urgent"].locations)


@pytest.mark.asyncio
async def test_saved_and_renamed_events(service, write_doc) -> None:
    path = write_doc("a.md", "#first")
    await service.initialize()
    Path(path).write_text("#second", encoding="utf-8")

    await service.handle_event(WorkspaceEvent(kind=WorkspaceEventKind.SAVED, paths=["a.md"]))
    assert _all_paths(service) == {("second",)}

    Path(path).rename(Path(path).with_name("b.md"))
    summary = await service.handle_event(
        WorkspaceEvent(kind=WorkspaceEventKind.RENAMED, paths=["b.md"], old_paths=["a.md"])
    )

    assert summary.files_indexed == 1
    assert [Path(p).name for p in service.index.file_paths()] == ["b.md"]


@pytest.mark.asyncio
async def test_sorting_is_runtime_setting(service, write_doc) -> None:
    write_doc("a.md", "#alpha #beta")
    write_doc("b.md", "#beta")
    await service.initialize()

    assert list(service.get_tree().children) == ["alpha", "beta"]

    settings = service.set_sorting(key=SortKey.COUNT_FILES, order=SortOrder.DESC)

    assert settings.key is SortKey.COUNT_FILES
    assert list(service.get_tree().children) == ["beta", "alpha"]
    assert list(service.get_tree(SortKey.NAME, SortOrder.ASC).children) == ["alpha", "beta"]

    service.set_sorting(order=SortOrder.ASC)
    assert service.sorting.key is SortKey.COUNT_FILES


@pytest.mark.asyncio
async def test_complete_and_references(service, write_doc) -> None:
    write_doc("a.md", "#proj/alpha #proj/beta/x")
    await service.initialize()

    assert [c.name for c in service.complete("#proj/")] == ["alpha", "beta"]
    assert len(service.references("#proj/alpha")) == 1
    assert service.references("proj") == []
    assert len(service.references("proj", include_descendants=True)) == 2


@pytest.mark.asyncio
async def test_rename_round_trip(service, write_doc) -> None:
    path = write_doc("f.md", "first line\nsee #a/b today\n#a/b/c stays")
    await service.initialize()

    result = await service.rename_tag("a/b", "c")

    assert result.old_tag == "#a/b"
    assert result.new_tag == "#a/c"
    assert [(e.file_path, e.line, e.new_line_text) for e in result.applied] == [
        (path, 1, "see #a/c today")
    ]
    assert result.skipped == []
    paths = _all_paths(service)
    assert ("a", "b") not in paths
    assert ("a", "c") in paths
    assert ("a", "b", "c") in paths


@pytest.mark.asyncio
async def test_rename_validation_applies_no_edits(service, write_doc) -> None:
    path = write_doc("f.md", "#a/b")
    await service.initialize()

    for bad in ("", "bad name", "bad#name"):
        with pytest.raises(TagValidationError):
            await service.rename_tag("a/b", bad)

    with pytest.raises(TagValidationError):
        await service.rename_tag("#", "ok")

    assert Path(path).read_text(encoding="utf-8") == "#a/b"
    assert _all_paths(service) == {("a", "b")}


@pytest.mark.asyncio
async def test_rename_to_same_name_is_noop(service, write_doc) -> None:
    write_doc("f.md", "#a/b")
    await service.initialize()

    result = await service.rename_tag("#a/b", "b")

    assert result.applied == []
    assert result.skipped == []


@pytest.mark.asyncio
async def test_initialized_after_scanning_empty_workspace(service) -> None:
    assert service.initialized is False

    await service.initialize()

    assert service.initialized is True
    assert len(service.index) == 0


@pytest.mark.asyncio
async def test_rename_skips_unwritable_file_and_rescans(service, write_doc, monkeypatch) -> None:
    writable = write_doc("a.md", "#x/y")
    locked = write_doc("b.md", "#x/y")
    await service.initialize()
    original_open = Path.open

    def guarded_open(self, mode="r", *args, **kwargs):
        if "w" in mode and str(self) == locked:
            raise PermissionError(13, "Permission denied", str(self))
        return original_open(self, mode, *args, **kwargs)

    monkeypatch.setattr(Path, "open", guarded_open)

    result = await service.rename_tag("x/y", "z")

    assert [edit.file_path for edit in result.applied] == [writable]
    assert [skipped.edit.file_path for skipped in result.skipped] == [locked]
    assert result.skipped[0].reason.startswith("Cannot write document")
    assert Path(locked).read_text(encoding="utf-8") == "#x/y"
    snapshot = service.index.snapshot()
    assert [o.path for o in snapshot[writable].occurrences] == [("x", "z")]
    assert [o.path for o in snapshot[locked].occurrences] == [("x", "y")]


@pytest.mark.asyncio
async def test_rename_rescans_when_apply_fails(service, write_doc, monkeypatch) -> None:
    path = write_doc("f.md", "#x/y")
    await service.initialize()

    async def failing_apply(edits, old_tag="", new_tag=""):
        Path(path).write_text("#x/z", encoding="utf-8")
        raise RuntimeError("disk vanished")

    monkeypatch.setattr(service.renamer, "apply_rename", failing_apply)

    with pytest.raises(RuntimeError):
        await service.rename_tag("x/y", "z")

    assert _all_paths(service) == {("x", "z")}
