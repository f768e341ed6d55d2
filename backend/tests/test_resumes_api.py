import io

import pytest
from fastapi import HTTPException, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.datastructures import Headers

from app.api.resumes import upload_resume
from app.config import settings
from app.main import app
from app.models.user import User
from app.services.storage import LocalFileStorage, StorageError, get_storage

RESUME_TEXT = b"Senior Python developer. Docker, PostgreSQL and React."


def _upload(client, headers, name="cv.txt", content=RESUME_TEXT, mime="text/plain", **form):
    return client.post("/api/resumes", files={"file": (name, content, mime)}, data=form, headers=headers)


class PresignedStorage(LocalFileStorage):
    name = "presigned"

    def presigned_url(self, key: str, expires_in: int = 3600) -> str | None:
        return f"https://files.example.com/{key}?expires={expires_in}"


class BrokenStorage(LocalFileStorage):
    def put(self, key, data, content_type, metadata=None):
        raise StorageError("bucket unreachable")


class UndeletableStorage(LocalFileStorage):
    def delete(self, key: str) -> bool:
        return False


class RecordingFile(io.BytesIO):
    def __init__(self, data: bytes) -> None:
        super().__init__(data)
        self.reads: list[int] = []

    def read(self, size: int = -1) -> bytes:
        self.reads.append(size)
        return super().read(size)


def test_upload_requires_authentication(client):
    assert _upload(client, {}).status_code == 401


def test_upload_stores_file_and_extracts_keywords(client, auth_headers, storage):
    response = _upload(client, auth_headers, title="  Backend CV ", description="For API roles", resumeType="technical")

    assert response.status_code == 201, response.text
    resume = response.json()
    assert resume["title"] == "Backend CV"
    assert resume["description"] == "For API roles"
    assert resume["resumeType"] == "technical"
    assert resume["originalName"] == "cv.txt"
    assert resume["mimeType"] == "text/plain"
    assert resume["fileSize"] == len(RESUME_TEXT)
    assert resume["isActive"] is True
    assert resume["downloadCount"] == 0
    assert "python" in resume["keywords"]
    assert resume["fileName"].startswith(f"resumes/user_{resume['userId']}/")
    assert resume["fileName"].endswith(".txt")
    assert storage.read(resume["fileName"]) == RESUME_TEXT


def test_upload_defaults_title_and_type(client, auth_headers):
    resume = _upload(client, auth_headers).json()

    assert resume["title"] == "cv.txt"
    assert resume["resumeType"] == "general"


def test_upload_rejects_oversized_file(client, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "max_resume_size_mb", 1)

    response = _upload(client, auth_headers, content=b"x" * (1024 * 1024 + 1))

    assert response.status_code == 413
    assert response.json()["error"]["message"] == "File too large. Maximum size is 1MB."


def test_oversized_upload_is_read_only_up_to_the_cap(monkeypatch, storage):
    monkeypatch.setattr(settings, "max_resume_size_mb", 1)
    body = RecordingFile(b"x" * (3 * 1024 * 1024))
    upload = UploadFile(file=body, filename="cv.txt", headers=Headers({"content-type": "text/plain"}))

    with pytest.raises(HTTPException) as excinfo:
        upload_resume(
            file=upload,
            title=None,
            description=None,
            resume_type=None,
            db=None,
            current_user=User(id=1),
            storage=storage,
        )

    assert excinfo.value.status_code == 413
    assert body.reads == [1024 * 1024 + 1]


@pytest.mark.parametrize(
    ("name", "mime", "expected"),
    [
        ("cv.exe", "text/plain", "File extension not allowed"),
        ("cv.txt", "image/png", "File type not allowed"),
    ],
)
def test_upload_rejects_disallowed_files(client, auth_headers, name, mime, expected):
    response = _upload(client, auth_headers, name=name, mime=mime)

    assert response.status_code == 400
    assert expected in response.json()["error"]["message"]


def test_upload_rejects_empty_file(client, auth_headers):
    response = _upload(client, auth_headers, content=b"")

    assert response.status_code == 400
    assert "File cannot be empty" in response.json()["error"]["message"]


def test_upload_storage_failure_is_bad_gateway(client, auth_headers, tmp_path):
    app.dependency_overrides[get_storage] = lambda: BrokenStorage(tmp_path / "broken")

    response = _upload(client, auth_headers)

    assert response.status_code == 502
    assert response.json()["error"]["message"] == "File storage is temporarily unavailable"
    assert client.get("/api/resumes", headers=auth_headers).json() == []


def test_list_resumes_only_returns_own(client, auth_headers, other_headers):
    _upload(client, auth_headers, title="Mine")
    _upload(client, other_headers, title="Theirs")

    resumes = client.get("/api/resumes", headers=auth_headers).json()

    assert [resume["title"] for resume in resumes] == ["Mine"]


def test_get_resume_of_other_user_is_not_found(client, auth_headers, other_headers):
    resume = _upload(client, other_headers).json()

    response = client.get(f"/api/resumes/{resume['id']}", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Resume not found"


def test_invalid_resume_id(client, auth_headers):
    response = client.get("/api/resumes/abc", headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Invalid resume ID"


def test_preview_streams_local_file_inline(client, auth_headers):
    resume = _upload(client, auth_headers).json()

    response = client.get(f"/api/resumes/{resume['id']}/preview", headers=auth_headers)

    assert response.status_code == 200
    assert response.content == RESUME_TEXT
    assert response.headers["content-type"].startswith("text/plain")
    assert response.headers["content-disposition"] == "inline; filename*=UTF-8''cv.txt"


def test_preview_of_other_users_resume_is_forbidden(client, auth_headers, other_headers):
    resume = _upload(client, other_headers).json()

    response = client.get(f"/api/resumes/{resume['id']}/preview", headers=auth_headers)

    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Access denied - you can only access your own resumes"


def test_preview_with_missing_file(client, auth_headers, storage):
    resume = _upload(client, auth_headers).json()
    storage.delete(resume["fileName"])

    response = client.get(f"/api/resumes/{resume['id']}/preview", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Resume file not found"


def test_download_counts_and_sets_attachment(client, auth_headers):
    resume = _upload(client, auth_headers).json()

    response = client.get(f"/api/resumes/{resume['id']}/download", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-disposition"] == "attachment; filename*=UTF-8''cv.txt"
    assert client.get(f"/api/resumes/{resume['id']}", headers=auth_headers).json()["downloadCount"] == 1


def test_download_of_other_users_resume_is_forbidden(client, auth_headers, other_headers):
    resume = _upload(client, other_headers).json()

    response = client.get(f"/api/resumes/{resume['id']}/download", headers=auth_headers)

    assert response.status_code == 403
    assert "download your own resumes" in response.json()["error"]["message"]


def test_download_redirects_to_presigned_url(client, auth_headers, tmp_path):
    app.dependency_overrides[get_storage] = lambda: PresignedStorage(tmp_path / "presigned")
    resume = _upload(client, auth_headers).json()

    response = client.get(f"/api/resumes/{resume['id']}/download", headers=auth_headers, follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == (
        f"https://files.example.com/{resume['fileName']}?expires={settings.signed_url_ttl_seconds}"
    )
    assert client.get(f"/api/resumes/{resume['id']}", headers=auth_headers).json()["downloadCount"] == 1


def test_set_active_deactivates_siblings(client, auth_headers):
    first = _upload(client, auth_headers, title="First").json()
    second = _upload(client, auth_headers, title="Second").json()

    response = client.put(f"/api/resumes/{second['id']}/set-active", json={"isActive": True}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["isActive"] is True
    assert client.get(f"/api/resumes/{first['id']}", headers=auth_headers).json()["isActive"] is False


def test_set_active_false(client, auth_headers):
    resume = _upload(client, auth_headers).json()

    response = client.put(f"/api/resumes/{resume['id']}/set-active", json={"isActive": False}, headers=auth_headers)

    assert response.json()["isActive"] is False


def test_delete_resume_removes_file_and_unlinks_jobs(client, auth_headers, storage):
    resume = _upload(client, auth_headers).json()
    job = client.post(
        "/api/jobs",
        json={"company": "Acme", "position": "Engineer", "resumeId": resume["id"]},
        headers=auth_headers,
    ).json()

    response = client.delete(f"/api/resumes/{resume['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Resume deleted successfully"
    assert not (storage.root / resume["fileName"]).exists()
    assert client.get(f"/api/resumes/{resume['id']}", headers=auth_headers).status_code == 404

    refreshed = client.get(f"/api/jobs/{job['id']}", headers=auth_headers).json()
    assert refreshed["resumeId"] is None
    assert refreshed["resume"] is None


def test_delete_resume_survives_storage_failure(client, auth_headers, tmp_path):
    storage = UndeletableStorage(tmp_path / "sticky")
    app.dependency_overrides[get_storage] = lambda: storage
    resume = _upload(client, auth_headers).json()

    response = client.delete(f"/api/resumes/{resume['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert client.get(f"/api/resumes/{resume['id']}", headers=auth_headers).status_code == 404
    assert storage.read(resume["fileName"]) == RESUME_TEXT


def test_download_succeeds_when_count_update_fails(client, auth_headers, monkeypatch):
    resume = _upload(client, auth_headers).json()

    def failing_commit(self):
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(Session, "commit", failing_commit)
    response = client.get(f"/api/resumes/{resume['id']}/download", headers=auth_headers)
    monkeypatch.undo()

    assert response.status_code == 200
    assert response.content == RESUME_TEXT
    assert client.get(f"/api/resumes/{resume['id']}", headers=auth_headers).json()["downloadCount"] == 0
