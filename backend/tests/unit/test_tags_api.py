import asyncio

import pytest
from fastapi.testclient import TestClient

from backend.src.api.main import app
from backend.src.services.config import AppConfig
from backend.src.services.errors import DocumentReadError
from backend.src.services.hashtags import HashtagService, get_hashtag_service

client = TestClient(app)


@pytest.fixture
def service(workspace_config: AppConfig, write_doc):
    write_doc("notes.md", "#work/urgent fix this\n#work/later")
    write_doc("todo.md", "#work/urgent also here")
    service = HashtagService(config=workspace_config)
    asyncio.run(service.initialize())

    app.dependency_overrides[get_hashtag_service] = lambda: service
    yield service
    app.dependency_overrides = {}


def test_get_tree(service) -> None:
    response = client.get("/api/tags/tree")

    assert response.status_code == 200
    data = response.json()
    work = data["children"]["work"]
    assert work["tag_count"] == 2
    assert work["file_count"] == 2
    assert list(work["children"]) == ["later", "urgent"]
    assert len(work["children"]["urgent"]["locations"]) == 2


def test_get_tree_with_sort_override(service) -> None:
    response = client.get(
        "/api/tags/tree", params={"sort_key": "countFiles", "sort_order": "desc"}
    )

    assert response.status_code == 200
    assert list(response.json()["children"]["work"]["children"]) == ["urgent", "later"]


def test_get_tree_rejects_unknown_sort_key(service) -> None:
    response = client.get("/api/tags/tree", params={"sort_key": "size"})

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


def test_complete_and_references(service) -> None:
    completions = client.get("/api/tags/complete", params={"prefix": "#work/"})
    references = client.get("/api/tags/references", params={"tag": "#work/urgent"})

    assert [item["name"] for item in completions.json()] == ["later", "urgent"]
    assert references.status_code == 200
    assert len(references.json()) == 2
    assert references.json()[0]["range"]["start"] == {"line": 0, "character": 0}


def test_update_sorting(service) -> None:
    response = client.put("/api/tags/sorting", json={"key": "countTags", "order": "desc"})

    assert response.status_code == 200
    assert response.json() == {"key": "countTags", "order": "desc"}
    assert client.get("/api/tags/sorting").json() == {"key": "countTags", "order": "desc"}


def test_rename_invalid_name_returns_400(service) -> None:
    response = client.post("/api/tags/rename", json={"tag": "work/later", "new_name": "bad name"})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "invalid_tag_name"
    assert body["message"] == "Tag name cannot contain spaces"
    assert body["detail"] == {"name": "bad name"}


def test_rename_and_events(service, write_doc) -> None:
    response = client.post("/api/tags/rename", json={"tag": "work/later", "new_name": "someday"})

    assert response.status_code == 200
    body = response.json()
    assert body["new_tag"] == "#work/someday"
    assert len(body["applied"]) == 1
    tree = client.get("/api/tags/tree").json()
    assert list(tree["children"]["work"]["children"]) == ["someday", "urgent"]

    extra = write_doc("extra.md", "#home")
    summary = client.post("/api/tags/events", json={"kind": "created", "paths": [extra]})

    assert summary.status_code == 200
    assert summary.json()["reason"] == "forFileCreatedOrUpdated"
    assert summary.json()["files_indexed"] == 3

    rescan = client.post("/api/tags/rescan")
    assert rescan.json()["reason"] == "forWorkspace"
    assert rescan.json()["occurrences"] == 4


def test_complete_ignores_partial_last_segment(service) -> None:
    response = client.get("/api/tags/complete", params={"prefix": "#work/ur"})

    assert response.status_code == 200
    assert [item["name"] for item in response.json()] == ["later", "urgent"]


def test_unmapped_service_error_returns_500(service, monkeypatch) -> None:
    async def failing_rename(tag, new_name):
        raise DocumentReadError("Cannot read document: gone.md", details={"file_path": "gone.md"})

    monkeypatch.setattr(service, "rename_tag", failing_rename)

    response = client.post("/api/tags/rename", json={"tag": "work/later", "new_name": "someday"})

    assert response.status_code == 500
    assert response.json() == {
        "error": "internal_error",
        "message": "Cannot read document: gone.md",
        "detail": {"file_path": "gone.md"},
    }
