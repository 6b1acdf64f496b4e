def test_admin_signup_is_idempotent(test_client):
    r = test_client.post("/admin/signup")
    assert r.status_code == 200, r.text
    assert r.json()["existing"] is False

    r = test_client.post("/admin/signup")
    assert r.status_code == 200
    assert r.json() == {"message": "Admin user already exists", "existing": True}


def test_login_and_me(test_client, auth_headers):
    r = test_client.get("/auth/me", headers=auth_headers)
    assert r.status_code == 200, r.text
    me = r.json()
    assert me["email"] == "admin@example.com"
    assert me["metadata"]["role"] == "admin"


def test_login_with_wrong_password(test_client):
    test_client.post("/admin/signup")
    r = test_client.post("/auth/login", json={"email": "admin@example.com", "password": "nope"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid login credentials"}


def test_missing_token_is_rejected(test_client):
    r = test_client.post("/subjects", json={"department": "CSE", "semester": "3", "subject": "Maths"})
    assert r.status_code == 401
    assert r.json()["error"] == "No authorization token provided"


def test_invalid_token_is_rejected(test_client):
    r = test_client.delete("/delete/123", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401
    assert r.json()["error"] == "Unauthorized access attempt"


def test_logout_revokes_token(test_client, auth_headers):
    r = test_client.post("/auth/logout", headers=auth_headers)
    assert r.status_code == 200
    r = test_client.get("/auth/me", headers=auth_headers)
    assert r.status_code == 401
