import pytest
from fastapi.testclient import TestClient

from birthday_interview.app import create_app
from birthday_interview.models.records import RecordKind
from birthday_interview.services.backup_manager import backup_manager


@pytest.fixture
def client(store):
    return TestClient(create_app())


def test_children_crud(client):
    created = client.post("/api/children", json={"name": "Nina", "birthday": "2020-02-14"}).json()
    child_id = created["id"]
    assert created["emoji"] == "🎈"

    assert [c["id"] for c in client.get("/api/children").json()] == [child_id]

    patched = client.patch(f"/api/children/{child_id}", json={"emoji": "🦕"})
    assert patched.json()["emoji"] == "🦕"
    assert patched.json()["name"] == "Nina"

    assert client.delete(f"/api/children/{child_id}").json()["child_deleted"] is True
    assert client.get(f"/api/children/{child_id}").status_code == 404
    assert client.delete(f"/api/children/{child_id}").status_code == 404


def test_create_child_validates_body(client):
    response = client.post("/api/children", json={"name": "Nina", "birthday": "someday"})
    assert response.status_code == 422


def test_interview_endpoints(client):
    client.post("/api/interviews", json={"childId": "c1", "year": 2023, "age": 3, "id": "i23"})
    client.post("/api/interviews", json={"childId": "c1", "year": 2024, "age": 4, "id": "i24"})
    client.post("/api/interviews", json={"childId": "c2", "year": 2024, "age": 7})

    mine = client.get("/api/interviews", params={"child_id": "c1"}).json()
    assert [i["id"] for i in mine] == ["i24", "i23"]
    assert len(client.get("/api/interviews").json()) == 3
    assert client.get("/api/children/c1/interviews").json()[0]["id"] == "i24"

    assert client.patch("/api/interviews/i23", json={"transcription": {"text": "hi"}}).status_code == 200
    assert client.get("/api/interviews/i23").json()["transcription"] == {"text": "hi"}
    assert client.delete("/api/interviews/i23").json()["deleted"] is True
    assert client.get("/api/interviews/i23").status_code == 404


def test_compare_rejects_unknown_category(client):
    assert client.get("/api/children/c1/compare", params={"category": "weather"}).status_code == 400
    rows = client.get("/api/children/c1/compare", params={"category": "favorites"}).json()
    assert rows and all(r["answers"] == [] for r in rows)


def test_metadata_export_and_import(client, store):
    client.post("/api/children", json={"id": "c1", "name": "Nina", "birthday": "2020-02-14"})
    exported = client.get("/api/backup/export").json()
    assert exported["children"][0]["id"] == "c1"

    exported["children"][0]["name"] = "Nina Rose"
    summary = client.post("/api/backup/import", json=exported).json()
    assert summary["children"] == 1
    assert client.get("/api/children/c1").json()["name"] == "Nina Rose"


def test_import_text_errors_are_400(client):
    response = client.post("/api/backup/import-text", json={"text": "{nope"})
    assert response.status_code == 400
    assert "Could not parse JSON" in response.json()["detail"]


def test_corrupt_store_is_500(client, store):
    store.backend._data[RecordKind.CHILDREN.storage_key] = "garbage"
    response = client.get("/api/children")
    assert response.status_code == 500
    assert "corrupt" in response.json()["detail"]


def test_restore_rejects_empty_upload(client):
    response = client.post("/api/backup/restore", content=b"")
    assert response.status_code == 400


def test_unknown_job(client):
    assert client.get("/api/backup/jobs/nope").status_code == 404
    assert client.get("/api/backup/jobs/nope/download").status_code == 404


def test_media_upload_and_share(client):
    client.post("/api/children", json={"id": "c1", "name": "Nina", "birthday": "2020-02-14"})
    uploaded = client.post(
        "/api/media/balloon", params={"child_id": "c1", "ext": "mov"}, content=b"pop",
    ).json()
    assert uploaded["filename"].startswith("balloon_c1_")
    assert uploaded["size_bytes"] == 3

    client.post("/api/balloon-runs", json={
        "id": "b1", "childId": "c1", "year": 2024, "age": 4, "videoUri": uploaded["path"],
    })
    shared = client.post("/api/share/balloon-runs/b1").json()
    assert shared["filename"] == "Nina_balloon_run_2024.mov"

    assert client.post("/api/share/cleanup").json() == {"removed": 1}
    assert client.post("/api/share/interviews/nope").status_code == 404
    assert client.post("/api/share/pets/1").status_code == 404


def test_backup_estimate_and_system_info(client, store, make_file):
    client.post("/api/interviews", json={
        "id": "i1", "childId": "c1", "year": 2024, "age": 4,
        "videoUri": make_file("v/i1.mp4", b"1234"),
    })
    assert client.get("/api/backup/estimate").json() == {"size_bytes": 4}

    info = client.post("/api/system/refresh").json()
    assert info["record_counts"]["interviews"] == 1
    assert info["backup_size_estimate"] == 4
    assert info["zip_available"] is True
    assert {b["backend_id"] for b in info["backends"]} >= {"json", "memory"}


def test_restore_conflict_after_upload_removes_upload(client, data_dir, monkeypatch):
    def busy(*args, **kwargs):
        raise RuntimeError("Another backup or restore is already in progress")

    # Another job claims the manager while the body is still streaming
    monkeypatch.setattr(backup_manager, "is_busy", lambda: False)
    monkeypatch.setattr(backup_manager, "create_job", busy)

    response = client.post("/api/backup/restore", content=b"PK\x03\x04 archive bytes")

    assert response.status_code == 409
    uploads = data_dir / "backups" / "uploads"
    assert list(uploads.iterdir()) == []


def test_media_upload_sanitizes_child_id(client, dirs):
    response = client.post(
        "/api/media/interview", params={"child_id": "../../escape", "ext": "mp4"}, content=b"rec",
    )

    assert response.status_code == 200
    directory = dirs.for_category("interview")
    assert [p.name for p in directory.iterdir()] == [response.json()["filename"]]
    assert response.json()["filename"].startswith("interview_______escape_")


def test_child_balloon_runs_and_media(client):
    client.post("/api/balloon-runs", json={"id": "b1", "childId": "c1", "year": 2024, "age": 4})
    client.post("/api/birthday-media", json={"id": "m1", "childId": "c1", "year": 2024, "age": 4})

    assert [r["id"] for r in client.get("/api/children/c1/balloon-runs").json()] == ["b1"]
    assert [m["id"] for m in client.get("/api/children/c1/birthday-media").json()] == ["m1"]


def test_system_info_survives_unlistable_directory(client, dirs):
    video_dir = dirs.for_category("interview")
    video_dir.parent.mkdir(parents=True, exist_ok=True)
    video_dir.write_bytes(b"not a directory")

    response = client.post("/api/system/refresh")

    assert response.status_code == 200
    entry = next(d for d in response.json()["directories"] if d["name"] == "interview")
    assert entry["exists"] is True
    assert entry["file_count"] == 0
