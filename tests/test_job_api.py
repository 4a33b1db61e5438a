import re


def test_client_creates_job_and_it_moves_through_work(client, auth_headers, actors):
    resp = client.post(
        "/jobs",
        json={"title": "AC repair", "description": "unit leaking"},
        headers=auth_headers("client"),
    )
    assert resp.status_code == 201
    job = resp.json()
    assert job["status"] == "TO_ASSIGN"
    assert job["technician_id"] is None
    assert job["client_id"] == actors.client.id
    assert re.match(r"^ZL-\d{4}-\d{3,}$", job["external_number"])

    resp = client.post(f"/jobs/{job['id']}/assign", json={"technician_id": actors.tech.id}, headers=auth_headers("admin"))
    assert resp.status_code == 200
    assert resp.json()["status"] == "ASSIGNED"
    assert resp.json()["technician_id"] == actors.tech.id

    for status in ("IN_PROGRESS", "DONE"):
        denied = client.patch(f"/jobs/{job['id']}", json={"status": status}, headers=auth_headers("other_tech"))
        assert denied.status_code == 403
        assert denied.json()["error_code"] == "FORBIDDEN"

        resp = client.patch(f"/jobs/{job['id']}", json={"status": status}, headers=auth_headers("tech"))
        assert resp.status_code == 200
        assert resp.json()["status"] == status

    done = client.get(f"/jobs/{job['id']}", headers=auth_headers("client")).json()
    assert done["completed_at"] is not None
    assert done["external_number"] == job["external_number"]


def test_requests_without_credentials_are_rejected(client):
    resp = client.get("/jobs")
    assert resp.status_code == 401
    assert resp.json()["error_code"] == "AUTH_FAILED"

    resp = client.get("/jobs", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_error_body_carries_correlation_id(client, auth_headers):
    resp = client.get("/jobs/9999", headers={**auth_headers("admin"), "X-Correlation-ID": "trace-123"})

    assert resp.status_code == 404
    body = resp.json()
    assert body["error_code"] == "JOB_NOT_FOUND"
    assert body["http_status"] == 404
    assert body["correlation_id"] == "trace-123"
    assert resp.headers["X-Correlation-ID"] == "trace-123"


def test_validation_and_conflict_errors(client, auth_headers, actors):
    resp = client.post("/jobs", json={"title": "No client"}, headers=auth_headers("admin"))
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "VALIDATION_ERROR"

    job = client.post("/jobs", json={"title": "AC repair"}, headers=auth_headers("client")).json()
    resp = client.patch(f"/jobs/{job['id']}", json={"status": "DONE"}, headers=auth_headers("admin"))
    assert resp.status_code == 400

    resp = client.patch(f"/jobs/{job['id']}", json={"status": "CANCELLED"}, headers=auth_headers("admin"))
    assert resp.status_code == 200
    resp = client.patch(f"/jobs/{job['id']}", json={"status": "WAITING"}, headers=auth_headers("admin"))
    assert resp.status_code == 409
    assert resp.json()["error_code"] == "INVALID_STATUS_TRANSITION"

    resp = client.post(f"/jobs/{job['id']}/assign", json={}, headers=auth_headers("admin"))
    assert resp.status_code == 400


def test_client_cannot_update_or_delete_jobs(client, auth_headers):
    job = client.post("/jobs", json={"title": "AC repair"}, headers=auth_headers("client")).json()

    assert client.patch(f"/jobs/{job['id']}", json={"title": "Mine"}, headers=auth_headers("client")).status_code == 403
    assert client.delete(f"/jobs/{job['id']}", headers=auth_headers("client")).status_code == 403

    assert client.delete(f"/jobs/{job['id']}", headers=auth_headers("admin")).status_code == 204
    assert client.get(f"/jobs/{job['id']}", headers=auth_headers("admin")).status_code == 404


def test_list_jobs_over_http(client, auth_headers, actors):
    for title in ("Heat pump service", "AC install", "AC repair"):
        client.post("/jobs", json={"title": title}, headers=auth_headers("client"))
    client.post("/jobs", json={"title": "Boiler"}, headers=auth_headers("other_client"))

    resp = client.get("/jobs", params={"q": "ac", "sort": "id", "order": "asc"}, headers=auth_headers("client"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["meta"]["total"] == 2
    assert [j["title"] for j in body["jobs"]] == ["AC install", "AC repair"]

    resp = client.get("/jobs", params={"limit": 1, "page": 2}, headers=auth_headers("admin"))
    assert resp.json()["meta"] == {"total": 4, "page": 2, "limit": 1}
    assert len(resp.json()["jobs"]) == 1


def test_service_catalog(client, auth_headers):
    resp = client.get("/services")
    assert resp.status_code == 200
    codes = [s["code"] for s in resp.json()]
    assert "AC_SERVICE" in codes

    job = client.post("/jobs", json={"service_type": "AC_SERVICE"}, headers=auth_headers("client")).json()
    assert job["title"] == "Air conditioning service"
    assert job["service_type"] == "AC_SERVICE"
