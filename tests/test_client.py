import httpx
import pytest

from notes_portal.client.portal import AdminView, PortalClient, PortalClientError, StudentView, catalog_sections
from notes_portal.client.selection import Selection, fetch_key, needs_fetch, upload_problem


def test_fetch_key_requires_three_coordinates():
    s = Selection().select_department("CSE").select_semester(3)
    assert s.state == "semester"
    assert fetch_key(s) is None
    s = s.select_subject("Data Structures")
    assert fetch_key(s) == ("CSE", "3", "Data Structures")


def test_needs_fetch_only_when_key_changes():
    a = Selection("CSE", "3", "DS")
    assert needs_fetch(None, a)
    assert not needs_fetch(a, a.select_content_type("notes"))
    assert needs_fetch(a, a.select_semester(4))
    assert not needs_fetch(a, Selection("CSE"))


def test_changing_department_keeps_subject():
    s = Selection("CSE", "3", "Data Structures").select_department("MECH")
    assert s.subject == "Data Structures"
    assert fetch_key(s) == ("MECH", "3", "Data Structures")


def test_upload_problem():
    s = Selection("CSE", "3", "DS")
    assert upload_problem(s).startswith("Please select department")
    assert upload_problem(s.select_content_type("iaPaper")) is None
    notes = s.select_content_type("notes")
    assert upload_problem(notes) == "Please select a module for notes upload."
    assert notes.select_module(2).state == "module"
    assert upload_problem(notes.select_module(2)) is None
    assert upload_problem(notes.select_module(9)) == "Unknown module: 9"


def test_catalog_sections_have_empty_messages():
    from notes_portal.models.catalog import ContentCatalog

    sections = catalog_sections(ContentCatalog())
    assert len(sections) == 7
    assert sections[0] == ("Previous Year Papers", [], "No previous year papers available")
    assert sections[-1][0] == "Module 5 Notes"


def test_fetch_failure_yields_empty_catalog():
    def handler(request):
        return httpx.Response(500, json={"error": "Failed to read from key-value store"})

    client = PortalClient("http://portal", transport=httpx.MockTransport(handler))
    catalog = client.fetch_catalog("CSE", "3", "DS")
    assert catalog.is_empty()


def test_health_check_handles_network_errors():
    def handler(request):
        raise httpx.ConnectTimeout("timeout", request=request)

    client = PortalClient("http://portal", transport=httpx.MockTransport(handler))
    assert client.health() is False


def test_admin_and_student_views_against_api(test_client):
    admin_client = PortalClient("http://testserver", http=test_client)
    assert admin_client.health()
    assert admin_client.bootstrap_admin()
    admin_client.login("admin@example.com", "s3cret-pass")

    admin = AdminView(admin_client)
    admin.choose_department("CSE")
    assert admin.catalog is None
    admin.choose_semester(3)
    admin.choose_subject("Data Structures")
    assert admin.catalog is not None and admin.catalog.is_empty()

    assert admin.upload("exam.pdf", b"%PDF") is None
    assert admin.message.startswith("Please select department")
    admin.dismiss()

    admin.choose_content_type("previousYearPaper")
    record = admin.upload("exam.pdf", b"%PDF")
    assert record is not None
    assert admin.message == "File uploaded successfully!"
    assert [r.name for r in admin.catalog.previousYearPapers] == ["exam.pdf"]

    student = StudentView(PortalClient("http://testserver", http=test_client))
    student.choose_department("CSE")
    student.choose_semester("3")
    student.choose_subject("Data Structures")
    url = student.download(student.catalog.previousYearPapers[0])
    assert url and url.startswith("memory://")

    assert admin.delete(record.id)
    assert admin.catalog.previousYearPapers == []
    assert not admin.delete(record.id)
    assert admin.message == "Delete failed: File not found"


def test_admin_add_subject_needs_selection(test_client):
    client = PortalClient("http://testserver", http=test_client)
    admin = AdminView(client)
    assert not admin.add_subject("Maths")
    assert admin.message == "Please select department and semester before adding a subject."

    admin.choose_department("ISE")
    admin.choose_semester(5)
    assert not admin.add_subject("Maths")
    assert admin.message == "Add subject failed: No authorization token provided"


def test_clearing_module_or_semester_with_none():
    s = Selection("CSE", "3", "DS", "notes", "2")
    cleared = s.select_module(None)
    assert cleared.module == ""
    assert upload_problem(cleared) == "Please select a module for notes upload."
    assert s.select_semester(None).semester == ""
    assert fetch_key(s.select_semester(None)) is None


def test_client_reports_server_error_message_for_unknown_route(test_client):
    client = PortalClient("http://testserver", http=test_client)
    with pytest.raises(PortalClientError) as exc:
        client._call("GET", "/nope", "Fetch")
    assert str(exc.value) == "Fetch failed: Not Found"
