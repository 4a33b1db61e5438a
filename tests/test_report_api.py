import pytest


@pytest.fixture
def assigned_job(client, auth_headers, actors):
    return client.post(
        "/jobs",
        json={"client_id": actors.client.id, "technician_id": actors.tech.id, "title": "AC repair"},
        headers=auth_headers("admin"),
    ).json()


def _files(png, *names):
    return [("photos", (name, png, "image/png")) for name in names]


def test_technician_uploads_report(client, auth_headers, storage, assigned_job, png_bytes):
    resp = client.post(
        f"/jobs/{assigned_job['id']}/reports",
        data={"description": "Replaced capacitor"},
        files=_files(png_bytes, "before.png", "after.png"),
        headers=auth_headers("tech"),
    )
    assert resp.status_code == 201
    report = resp.json()
    assert report["description"] == "Replaced capacitor"
    assert report["job_external_number"] == assigned_job["external_number"]
    assert [p["original_name"] for p in report["photos"]] == ["before.png", "after.png"]
    for photo in report["photos"]:
        assert photo["url"].endswith(photo["file_path"])
        assert (storage.root / photo["file_path"]).exists()


def test_empty_report_is_rejected(client, auth_headers, assigned_job):
    resp = client.post(
        f"/jobs/{assigned_job['id']}/reports", data={"description": "  "}, headers=auth_headers("tech")
    )
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "VALIDATION_ERROR"


def test_non_image_upload_is_rejected(client, auth_headers, assigned_job):
    resp = client.post(
        f"/jobs/{assigned_job['id']}/reports",
        files=[("photos", ("notes.txt", b"hello", "text/plain"))],
        headers=auth_headers("tech"),
    )
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "INVALID_FILE_TYPE"


def test_deleted_photo_disappears_from_job_reports(client, auth_headers, assigned_job, png_bytes):
    report = client.post(
        f"/jobs/{assigned_job['id']}/reports",
        data={"description": "Visit"},
        files=_files(png_bytes, "a.png", "b.png"),
        headers=auth_headers("tech"),
    ).json()
    removed, kept = report["photos"]

    resp = client.delete(f"/reports/photos/{removed['id']}", headers=auth_headers("tech"))
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()["photos"]] == [kept["id"]]

    listed = client.get(f"/jobs/{assigned_job['id']}/reports", headers=auth_headers("client")).json()
    assert [p["id"] for p in listed["reports"][0]["photos"]] == [kept["id"]]


def test_add_photos_and_edit_description(client, auth_headers, assigned_job, png_bytes):
    report = client.post(
        f"/jobs/{assigned_job['id']}/reports", data={"description": "Visit"}, headers=auth_headers("tech")
    ).json()

    resp = client.post(f"/reports/{report['id']}/photos", files=_files(png_bytes, "c.png"), headers=auth_headers("tech"))
    assert resp.status_code == 201
    assert len(resp.json()["photos"]) == 1

    resp = client.patch(f"/reports/{report['id']}", json={"description": "Visit, updated"}, headers=auth_headers("tech"))
    assert resp.status_code == 200
    assert resp.json()["description"] == "Visit, updated"

    assert client.patch(f"/reports/{report['id']}", json={"description": "x"}, headers=auth_headers("other_tech")).status_code == 403


def test_list_reports_for_technician(client, auth_headers, assigned_job):
    client.post(f"/jobs/{assigned_job['id']}/reports", data={"description": "Visit"}, headers=auth_headers("tech"))

    assert len(client.get("/reports", headers=auth_headers("tech")).json()["reports"]) == 1
    assert client.get("/reports", headers=auth_headers("other_tech")).json()["reports"] == []
    assert client.get("/reports", headers=auth_headers("client")).status_code == 403
