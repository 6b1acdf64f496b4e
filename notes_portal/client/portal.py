from __future__ import annotations

import logging
from typing import List, Optional, Tuple
from urllib.parse import quote

import httpx

from notes_portal.client.selection import Selection, fetch_key, needs_fetch, upload_problem
from notes_portal.models.catalog import MODULE_IDS, ContentCatalog, FileRecord, module_key

logger = logging.getLogger(__name__)

HEALTH_TIMEOUT = 5.0
SESSION_TIMEOUT = 5.0
SIGNUP_TIMEOUT = 8.0


class PortalClientError(Exception):
    """Erreur côté client : un simple message affichable."""


def _seg(value: str) -> str:
    return quote(str(value), safe="")


def _error_message(resp: httpx.Response) -> str:
    try:
        return resp.json().get("error") or "Unknown error"
    except ValueError:
        return resp.reason_phrase or "Unknown error"


class PortalClient:
    """
    Client HTTP de l'API (ce que font les pages étudiant / admin).
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
        http: Optional[httpx.Client] = None,
    ):
        self.token = token
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self.http.close()

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _call(self, method: str, url: str, action: str, **kwargs) -> dict:
        try:
            resp = self.http.request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            raise PortalClientError(f"{action} error: {e}") from e
        if resp.is_error:
            raise PortalClientError(f"{action} failed: {_error_message(resp)}")
        return resp.json()

    # ---------- Session ----------

    def health(self) -> bool:
        try:
            resp = self.http.get("/health", timeout=HEALTH_TIMEOUT)
            return resp.is_success and resp.json().get("status") == "ok"
        except httpx.HTTPError as e:
            logger.info("Server health check failed: %s", e)
            return False

    def bootstrap_admin(self) -> bool:
        try:
            resp = self.http.post("/admin/signup", timeout=SIGNUP_TIMEOUT)
        except httpx.HTTPError as e:
            logger.info("Admin setup skipped: %s", e)
            return False
        return resp.is_success

    def login(self, email: str, password: str) -> str:
        data = self._call(
            "POST", "/auth/login", "Login",
            json={"email": email, "password": password},
            timeout=SESSION_TIMEOUT,
        )
        self.token = data["access_token"]
        return self.token

    def logout(self) -> None:
        # On oublie le token même si le serveur ne répond pas
        try:
            if self.token:
                self._call("POST", "/auth/logout", "Logout", timeout=SESSION_TIMEOUT)
        except PortalClientError as e:
            logger.info("Logout error: %s", e)
        finally:
            self.token = None

    # ---------- Catalogue ----------

    def fetch_catalog(self, department: str, semester: str, subject: str) -> ContentCatalog:
        """Catalogue de la matière ; catalogue vide en cas d'échec."""
        url = f"/content/{_seg(department)}/{_seg(semester)}/{_seg(subject)}"
        try:
            return ContentCatalog.model_validate(self._call("GET", url, "Fetch content"))
        except PortalClientError as e:
            logger.error("Error fetching content: %s", e)
            return ContentCatalog()

    def download_url(self, path: str) -> str:
        return self._call("POST", "/download", "Download", json={"filePath": path})["url"]

    def add_subject(self, department: str, semester: str, subject: str) -> None:
        self._call(
            "POST", "/subjects", "Add subject",
            json={"department": department, "semester": semester, "subject": subject},
        )

    def upload(self, selection: Selection, file_name: str, data: bytes) -> FileRecord:
        form = {
            "department": selection.department,
            "semester": selection.semester,
            "subject": selection.subject,
            "contentType": selection.content_type,
        }
        if selection.content_type == "notes":
            form["module"] = selection.module
        body = self._call(
            "POST", "/admin/upload", "Upload",
            data=form,
            files={"file": (file_name, data)},
        )
        return FileRecord.model_validate(body["fileRecord"])

    def delete(self, selection: Selection, file_id: str) -> None:
        url = "/admin/delete/" + "/".join(
            _seg(v) for v in (selection.department, selection.semester, selection.subject, file_id)
        )
        self._call("DELETE", url, "Delete")


def catalog_sections(catalog: ContentCatalog) -> List[Tuple[str, List[FileRecord], str]]:
    """(titre, fichiers, message si vide) pour chaque bloc affiché."""
    sections = [
        ("Previous Year Papers", catalog.previousYearPapers, "No previous year papers available"),
        ("IA Papers", catalog.iaPapers, "No IA papers available"),
    ]
    for m in MODULE_IDS:
        sections.append(
            (f"Module {m} Notes", catalog.notes.get(module_key(m), []), f"No notes available for Module {m}")
        )
    return sections


class StudentView:
    """
    Vue étudiant : sélection + catalogue courant + un message texte unique.
    Pas d'annulation des requêtes, pas de cache entre sélections.
    """

    def __init__(self, client: PortalClient):
        self.client = client
        self.selection = Selection()
        self.catalog: Optional[ContentCatalog] = None
        self.message = ""

    def _apply(self, selection: Selection) -> None:
        previous, self.selection = self.selection, selection
        if fetch_key(selection) is None:
            self.catalog = None
        elif needs_fetch(previous, selection):
            self.refresh()

    def choose_department(self, department: str) -> None:
        self._apply(self.selection.select_department(department))

    def choose_semester(self, semester) -> None:
        self._apply(self.selection.select_semester(semester))

    def choose_subject(self, subject: str) -> None:
        self._apply(self.selection.select_subject(subject))

    def refresh(self) -> None:
        key = fetch_key(self.selection)
        self.catalog = self.client.fetch_catalog(*key) if key else None

    def download(self, record: FileRecord) -> Optional[str]:
        try:
            return self.client.download_url(record.path)
        except PortalClientError as e:
            self.message = str(e)
            return None

    def dismiss(self) -> None:
        self.message = ""


class AdminView(StudentView):
    def choose_content_type(self, content_type: str) -> None:
        self._apply(self.selection.select_content_type(content_type))

    def choose_module(self, module) -> None:
        self._apply(self.selection.select_module(module))

    def add_subject(self, name: str) -> bool:
        name = name.strip()
        if not (name and self.selection.department and self.selection.semester):
            self.message = "Please select department and semester before adding a subject."
            return False
        try:
            self.client.add_subject(self.selection.department, self.selection.semester, name)
        except PortalClientError as e:
            self.message = str(e)
            return False
        self.message = "Subject added successfully!"
        return True

    def upload(self, file_name: str, data: bytes) -> Optional[FileRecord]:
        problem = upload_problem(self.selection)
        if problem:
            self.message = problem
            return None
        try:
            record = self.client.upload(self.selection, file_name, data)
        except PortalClientError as e:
            self.message = str(e)
            return None
        self.message = "File uploaded successfully!"
        self.refresh()
        return record

    def delete(self, file_id: str) -> bool:
        try:
            self.client.delete(self.selection, file_id)
        except PortalClientError as e:
            self.message = str(e)
            return False
        self.message = "File deleted successfully!"
        self.refresh()
        return True
