from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

MODULE_IDS = (1, 2, 3, 4, 5)


def module_key(module: int) -> str:
    return f"module{module}"


class ContentType(str, Enum):
    previousYearPaper = "previousYearPaper"
    iaPaper = "iaPaper"
    notes = "notes"


# Nom de la liste du catalogue pour chaque type de contenu
SECTION_BY_TYPE = {
    ContentType.previousYearPaper: "previousYearPapers",
    ContentType.iaPaper: "iaPapers",
    ContentType.notes: "notes",
}


class FileRecord(BaseModel):
    id: str = Field(..., description="Identifiant (timestamp en millisecondes)")
    name: str = Field(..., description="Nom d'origine du fichier")
    path: str = Field(..., description="Clé du fichier dans le bucket")
    uploadedAt: str = Field(..., description="Date d'upload ISO-8601")


def _empty_notes() -> Dict[str, List[FileRecord]]:
    return {module_key(m): [] for m in MODULE_IDS}


class ContentCatalog(BaseModel):
    previousYearPapers: List[FileRecord] = Field(default_factory=list)
    iaPapers: List[FileRecord] = Field(default_factory=list)
    notes: Dict[str, List[FileRecord]] = Field(default_factory=_empty_notes)

    @field_validator("notes", mode="before")
    @classmethod
    def _fill_modules(cls, value):
        # Les 5 modules existent toujours, même absents du stockage
        notes = dict(value or {})
        for m in MODULE_IDS:
            notes.setdefault(module_key(m), [])
        return notes

    def all_records(self) -> List[FileRecord]:
        records = self.previousYearPapers + self.iaPapers
        for files in self.notes.values():
            records.extend(files)
        return records

    def is_empty(self) -> bool:
        return not self.all_records()


class FileLocation(BaseModel):
    """Entrée de l'index secondaire fileId -> emplacement dans le catalogue."""

    department: str
    semester: str
    subject: str
    contentType: ContentType
    module: Optional[int] = None


class ContentStructure(BaseModel):
    departments: List[str]
    semesters: List[int]
    subjects: Dict[str, List[str]]


class Principal(BaseModel):
    id: str
    email: Optional[str] = None
    metadata: dict = Field(default_factory=dict)


# ---------- Requêtes / réponses ----------

class AddSubjectRequest(BaseModel):
    department: str = ""
    semester: str = ""
    subject: str = ""

    @field_validator("department", "semester", "subject", mode="before")
    @classmethod
    def _coerce(cls, value):
        # Le client envoie parfois le semestre en nombre
        return "" if value is None else str(value)


class DownloadRequest(BaseModel):
    filePath: str = ""


class DownloadResponse(BaseModel):
    url: str


class MessageResponse(BaseModel):
    message: str


class UploadResponse(BaseModel):
    message: str = "File uploaded successfully"
    fileRecord: FileRecord


class SignupResponse(BaseModel):
    message: str
    existing: bool = False


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Principal
