def test_structure_lists_static_departments_and_semesters(test_client):
    r = test_client.get("/content/structure")
    assert r.status_code == 200
    data = r.json()
    assert data["departments"] == ["CSE", "AI&ML", "ISE", "CIVIL", "MECH", "ECE"]
    assert data["semesters"] == [1, 2, 3, 4, 5, 6, 7, 8]
    assert "Data Structures" in data["subjects"]["CSE"]


def test_unknown_subject_returns_empty_catalog_without_persisting(test_client, backends):
    r = test_client.get("/content/CSE/3/Data Structures")
    assert r.status_code == 200
    assert r.json() == {
        "previousYearPapers": [],
        "iaPapers": [],
        "notes": {f"module{m}": [] for m in range(1, 6)},
    }
    assert backends.kv.data == {}


def test_add_subject_is_idempotent(test_client, auth_headers):
    body = {"department": "CSE", "semester": 3, "subject": "Data Structures"}
    for _ in range(2):
        r = test_client.post("/subjects", json=body, headers=auth_headers)
        assert r.status_code == 200, r.text
        assert r.json() == {"message": "Subject added successfully"}

    r = test_client.get("/content/subjects/CSE/3")
    assert r.status_code == 200
    assert r.json() == ["Data Structures"]


def test_add_subject_keeps_insertion_order(test_client, auth_headers):
    for name in ("Maths", "Physics", "Maths", "Chemistry"):
        test_client.post(
            "/subjects",
            json={"department": "ECE", "semester": "1", "subject": name},
            headers=auth_headers,
        )
    assert test_client.get("/content/subjects/ECE/1").json() == ["Maths", "Physics", "Chemistry"]


def test_add_subject_requires_all_fields(test_client, auth_headers, backends):
    r = test_client.post(
        "/subjects",
        json={"department": "CSE", "semester": "3", "subject": "  "},
        headers=auth_headers,
    )
    assert r.status_code == 400
    assert r.json() == {"error": "Missing required fields"}

    r = test_client.post("/subjects", json={"department": "CSE"}, headers=auth_headers)
    assert r.status_code == 400
    assert backends.kv.data == {}


def test_subjects_for_unknown_semester_is_empty(test_client):
    r = test_client.get("/content/subjects/MECH/8")
    assert r.status_code == 200
    assert r.json() == []
