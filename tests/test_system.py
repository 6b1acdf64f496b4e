def test_health(test_client):
    r = test_client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert "version" in data

def test_version(test_client):
    r = test_client.get("/version")
    assert r.status_code == 200
    data = r.json()
    assert data["name"] == "Notes Portal API (tests)"
    assert data["env"] == "test"

def test_root_redirects_to_docs(test_client):
    r = test_client.get("/", follow_redirects=False)
    assert r.status_code in (301, 302, 307, 308)
    assert "/docs" in r.headers.get("location", "")

def test_unknown_route_is_404(test_client):
    r = test_client.get("/nope")
    assert r.status_code == 404
    assert r.json() == {"error": "Not Found"}

def test_wrong_method_uses_error_shape(test_client):
    r = test_client.put("/health")
    assert r.status_code == 405
    assert r.json() == {"error": "Method Not Allowed"}
    assert "GET" in r.headers.get("allow", "")
