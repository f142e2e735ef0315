import uuid

import pytest

from covershift.services import profile_service

API = "/api/v1"


def test_profile_created_on_first_request(client, token):
    user_id = uuid.uuid4()

    class NewUser:
        id = user_id
        email = "new.teacher@example.com"

    headers = {"Authorization": f"Bearer {token(NewUser)}"}
    r = client.get(f"{API}/profiles/me", headers=headers)
    assert r.status_code == 200
    body = r.json()
    assert body["id"] == str(user_id)
    assert body["email"] == "new.teacher@example.com"
    assert body["role"] is None


def test_expired_token_rejected(client, token, teacher):
    headers = {"Authorization": f"Bearer {token(teacher, expires_in=-60)}"}
    assert client.get(f"{API}/profiles/me", headers=headers).status_code == 401


def test_sync_sets_role(client, auth, make_profile):
    someone = make_profile(role=None)
    r = client.post(f"{API}/profiles/me/sync", json={"role": "Sub"}, headers=auth(someone))
    assert r.status_code == 200
    assert r.json()["role"] == "teacher"

    r = client.get(f"{API}/gate", params={"want": "teacher"}, headers=auth(someone))
    assert r.json()["status"] == "ok"


def test_sync_rejects_unknown_role(client, auth, teacher):
    r = client.post(f"{API}/profiles/me/sync", json={"role": "admin"}, headers=auth(teacher))
    assert r.status_code == 422


def test_update_profile(client, auth, teacher):
    r = client.patch(
        f"{API}/profiles/me",
        json={
            "full_name": "  Tess O'Brien ",
            "phone_number": "087 123 4567",
            "county": "Galway",
            "teaching_council_number": "TC-12345",
        },
        headers=auth(teacher),
    )
    assert r.status_code == 200
    body = r.json()
    assert body["full_name"] == "Tess O'Brien"
    assert body["county"] == "Galway"

    r = client.patch(f"{API}/profiles/me", json={"county": ""}, headers=auth(teacher))
    assert r.json()["county"] is None


@pytest.mark.parametrize(
    "field,value",
    [
        ("phone_number", "12345"),
        ("county", "Antrim"),
        ("teaching_council_number", "ab"),
    ],
)
def test_update_profile_validation(client, auth, teacher, field, value):
    r = client.patch(f"{API}/profiles/me", json={field: value}, headers=auth(teacher))
    assert r.status_code == 422


def test_avatar_upload(client, auth, monkeypatch, teacher):
    uploads = []

    def fake_upload(bucket, path, data, content_type):
        uploads.append((bucket, path, data, content_type))
        return f"https://cdn.test/storage/v1/object/public/{bucket}/{path}"

    monkeypatch.setattr(profile_service, "upload_to_storage", fake_upload)
    monkeypatch.setattr(profile_service, "delete_public_url", lambda bucket, url: None)

    r = client.post(
        f"{API}/profiles/me/avatar",
        files={"file": ("me.png", b"\x89PNG...", "image/png")},
        headers=auth(teacher),
    )
    assert r.status_code == 200
    (bucket, path, data, content_type), = uploads
    assert bucket == "avatars"
    assert path.startswith(f"{teacher.id}/") and path.endswith(".png")
    assert r.json()["avatar_url"].endswith(path)


def test_avatar_upload_rejects_pdf(client, auth, monkeypatch, teacher):
    monkeypatch.setattr(profile_service, "upload_to_storage", pytest.fail)
    r = client.post(
        f"{API}/profiles/me/avatar",
        files={"file": ("cv.pdf", b"%PDF-1.4", "application/pdf")},
        headers=auth(teacher),
    )
    assert r.status_code == 400


def test_qualifications_upload_is_teacher_only(client, auth, principal):
    r = client.post(
        f"{API}/profiles/me/qualifications",
        files={"file": ("cv.pdf", b"%PDF-1.4", "application/pdf")},
        headers=auth(principal),
    )
    assert r.status_code == 403
