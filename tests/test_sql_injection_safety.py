def test_job_id_path_injection_returns_422(client, auth_headers):
    # Path param expects int; injection-like string should fail validation
    resp = client.get("/jobs/1 OR 1=1", headers=auth_headers("admin"))
    assert resp.status_code == 422


def test_photo_id_path_injection_returns_422(client, auth_headers):
    resp = client.delete("/reports/photos/1; DROP TABLE users;--", headers=auth_headers("tech"))
    assert resp.status_code == 422


def test_invoice_query_params_injection_returns_422(client, auth_headers):
    # page and limit are ints; injection-like strings should fail
    resp = client.get("/invoices?page=1; DROP TABLE invoices;--&limit=100", headers=auth_headers("admin"))
    assert resp.status_code == 422


def test_body_injection_on_assign_returns_422(client, auth_headers):
    resp = client.post("/jobs/1/assign", json={"technician_id": "1 OR 1=1"}, headers=auth_headers("admin"))
    assert resp.status_code == 422


def test_search_text_is_bound_not_interpolated(client, auth_headers):
    client.post("/jobs", json={"title": "AC repair"}, headers=auth_headers("client"))

    resp = client.get("/jobs", params={"q": "' OR '1'='1"}, headers=auth_headers("admin"))
    assert resp.status_code == 200
    assert resp.json()["meta"]["total"] == 0
