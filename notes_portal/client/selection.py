"""
État de sélection des vues étudiant / admin.

department -> semester -> subject -> contentType (admin) -> module (notes).

Les transitions renvoient une nouvelle sélection et ne vident PAS les champs
dépendants : changer de département garde la matière choisie précédemment.
Le déclenchement du chargement est une fonction pure de l'état (`fetch_key`).
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from notes_portal.models.catalog import MODULE_IDS, ContentType

CatalogKey = Tuple[str, str, str]


def _text(value) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class Selection:
    department: str = ""
    semester: str = ""
    subject: str = ""
    content_type: str = ""
    module: str = ""

    def select_department(self, department: str) -> "Selection":
        return replace(self, department=department)

    def select_semester(self, semester) -> "Selection":
        return replace(self, semester=_text(semester))

    def select_subject(self, subject: str) -> "Selection":
        return replace(self, subject=subject)

    def select_content_type(self, content_type: str) -> "Selection":
        return replace(self, content_type=content_type)

    def select_module(self, module) -> "Selection":
        return replace(self, module=_text(module))

    @property
    def state(self) -> str:
        if not self.department:
            return "none"
        if not self.semester:
            return "department"
        if not self.subject:
            return "semester"
        if not self.content_type:
            return "subject"
        if self.content_type == ContentType.notes.value and self.module:
            return "module"
        return "content_type"


def fetch_key(selection: Selection) -> Optional[CatalogKey]:
    """(département, semestre, matière) si les trois sont choisis, sinon None."""
    if selection.department and selection.semester and selection.subject:
        return (selection.department, selection.semester, selection.subject)
    return None


def needs_fetch(previous: Optional[Selection], current: Selection) -> bool:
    key = fetch_key(current)
    if key is None:
        return False
    return previous is None or fetch_key(previous) != key


def upload_problem(selection: Selection) -> Optional[str]:
    if not (selection.department and selection.semester and selection.subject and selection.content_type):
        return "Please select department, semester, subject, and content type before uploading."
    if selection.content_type == ContentType.notes.value:
        if not selection.module:
            return "Please select a module for notes upload."
        if selection.module not in {str(m) for m in MODULE_IDS}:
            return f"Unknown module: {selection.module}"
    return None
