from __future__ import annotations

import logging
import os
import threading
from datetime import datetime, timezone
from typing import Callable, List, Optional, Union

from notes_portal.core.config import Settings
from notes_portal.core.errors import NotFoundError, PayloadTooLargeError, UpstreamError, ValidationError
from notes_portal.models.catalog import (
    MODULE_IDS,
    SECTION_BY_TYPE,
    ContentCatalog,
    ContentStructure,
    ContentType,
    FileLocation,
    FileRecord,
    module_key,
)
from notes_portal.services.blob_store import BlobStore
from notes_portal.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

# Matières proposées par défaut dans les listes de sélection
DEFAULT_SUBJECTS = {
    "CSE": ["Mathematics", "Data Structures", "Computer Networks", "Operating Systems", "Software Engineering"],
    "AI&ML": ["Mathematics", "Machine Learning", "Data Science", "Artificial Intelligence", "Statistics"],
    "ISE": ["Mathematics", "Information Systems", "Database Management", "Systems Analysis", "Project Management"],
    "ECE": ["Mathematics", "Circuit Analysis", "Digital Electronics", "Communication Systems", "Control Systems"],
    "MECH": ["Mathematics", "Thermodynamics", "Fluid Mechanics", "Machine Design", "Manufacturing Processes"],
    "CIVIL": ["Mathematics", "Structural Analysis", "Concrete Technology", "Surveying", "Construction Management"],
}

CONTENT_PREFIX = "content_"

# Réservation des ids partagée par toutes les instances du service (threadpool FastAPI)
_ID_LOCK = threading.Lock()


def subjects_key(department: str, semester: str) -> str:
    return f"subjects_{department}_{semester}"


def content_key(department: str, semester: str, subject: str) -> str:
    return f"{CONTENT_PREFIX}{department}_{semester}_{subject}"


def index_key(file_id: str) -> str:
    return f"file_index_{file_id}"


def _now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def _iso(ms: int) -> str:
    dt = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _required(*values) -> List[str]:
    cleaned = [("" if v is None else str(v)).strip() for v in values]
    if not all(cleaned):
        raise ValidationError()
    # "/" ajouterait un niveau au chemin et rendrait le catalogue inaccessible par URL
    if any("/" in v for v in cleaned):
        raise ValidationError("'/' is not allowed in department, semester or subject")
    return cleaned


def remove_record(catalog: ContentCatalog, file_id: str) -> Optional[FileRecord]:
    """
    Retire la première occurrence de `file_id` : previousYearPapers, puis
    iaPapers, puis chaque module de notes. Retourne l'enregistrement retiré.
    """
    for records in (catalog.previousYearPapers, catalog.iaPapers, *catalog.notes.values()):
        for i, record in enumerate(records):
            if record.id == file_id:
                return records.pop(i)
    return None


class CatalogService:
    """
    Catalogue des documents par (département, semestre, matière).

    Chaque mutation relit puis réécrit la valeur complète du catalogue
    (dernier écrivain gagnant, pas de verrou). Les deux écritures d'un upload
    (liste des matières + catalogue) sont idempotentes et peuvent être rejouées.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        blobs: BlobStore,
        settings: Settings,
        clock: Callable[[], int] = _now_ms,
        id_lock: threading.Lock = _ID_LOCK,
    ):
        self.kv = kv
        self.blobs = blobs
        self.settings = settings
        self.clock = clock
        self.id_lock = id_lock

    # ---------- Lecture ----------

    def get_structure(self) -> ContentStructure:
        departments = self.settings.departments
        return ContentStructure(
            departments=departments,
            semesters=self.settings.semesters,
            subjects={d: list(DEFAULT_SUBJECTS.get(d, [])) for d in departments},
        )

    def list_subjects(self, department: str, semester: str) -> List[str]:
        return self.kv.get(subjects_key(department, semester)) or []

    def get_catalog(self, department: str, semester: str, subject: str) -> ContentCatalog:
        # Catalogue vide par défaut, non persisté avant la première écriture
        stored = self.kv.get(content_key(department, semester, subject))
        if stored is None:
            return ContentCatalog()
        return ContentCatalog.model_validate(stored)

    def get_download_url(self, path: str) -> str:
        if not path or not path.strip():
            raise ValidationError("Missing file path")
        return self.blobs.create_signed_url(path, self.settings.SIGNED_URL_TTL)

    # ---------- Écriture ----------

    def add_subject(self, department: str, semester: str, subject: str) -> None:
        department, semester, subject = _required(department, semester, subject)
        self._register_subject(department, semester, subject)

    def _register_subject(self, department: str, semester: str, subject: str) -> None:
        key = subjects_key(department, semester)
        subjects = self.kv.get(key) or []
        if subject not in subjects:
            subjects.append(subject)
            self.kv.set(key, subjects)
            logger.info("Subject registered: %s / %s / %s", department, semester, subject)

    def _save(self, key: str, catalog: ContentCatalog) -> None:
        self.kv.set(key, catalog.model_dump(mode="json"))

    def _reserve_file_id(self, location: FileLocation) -> int:
        """
        Réserve un id libre en écrivant son entrée d'index sous verrou.
        Deux uploads dans la même milliseconde : on décale.
        """
        with self.id_lock:
            ts = self.clock()
            while self.kv.get(index_key(str(ts))) is not None:
                ts += 1
            self.kv.set(index_key(str(ts)), location.model_dump(mode="json"))
        return ts

    def upload_file(
        self,
        department: str,
        semester: str,
        subject: str,
        content_type: Union[str, ContentType, None],
        module: Union[str, int, None],
        data: Optional[bytes],
        file_name: Optional[str],
        mime_type: str = "application/octet-stream",
    ) -> FileRecord:
        department, semester, subject = _required(department, semester, subject)
        if data is None or not file_name or not content_type:
            raise ValidationError()

        try:
            ctype = ContentType(content_type)
        except ValueError:
            raise ValidationError(f"Invalid content type: {content_type}")

        mod: Optional[int] = None
        if ctype is ContentType.notes:
            if module is None or str(module).strip() == "":
                raise ValidationError("Module is required for notes")
            try:
                mod = int(str(module).strip())
            except ValueError:
                raise ValidationError(f"Invalid module: {module}")
            if mod not in MODULE_IDS:
                raise ValidationError(f"Invalid module: {module}")

        max_bytes = self.settings.max_upload_bytes
        if len(data) > max_bytes:
            raise PayloadTooLargeError(f"File too large (max {self.settings.MAX_UPLOAD_MB} MB)")

        name = os.path.basename(file_name)
        location = FileLocation(
            department=department,
            semester=semester,
            subject=subject,
            contentType=ctype,
            module=mod,
        )
        ts = self._reserve_file_id(location)
        parts = [department, semester, subject, ctype.value]
        if mod is not None:
            parts.append(module_key(mod))
        parts.append(f"{ts}_{name}")
        path = "/".join(parts)

        # Échec du stockage : propagé, la réservation est libérée
        try:
            self.blobs.upload(path, data, mime_type)
        except Exception:
            self.kv.delete(index_key(str(ts)))
            raise

        self._register_subject(department, semester, subject)

        record = FileRecord(id=str(ts), name=name, path=path, uploadedAt=_iso(ts))
        catalog = self.get_catalog(department, semester, subject)
        if ctype is ContentType.notes:
            catalog.notes[module_key(mod)].append(record)
        else:
            getattr(catalog, SECTION_BY_TYPE[ctype]).append(record)
        self._save(content_key(department, semester, subject), catalog)

        logger.info("File uploaded: %s (id=%s)", path, record.id)
        return record

    def _remove_blob(self, path: str) -> None:
        try:
            self.blobs.remove(path)
        except UpstreamError as e:
            # Le catalogue est déjà à jour : le fichier reste orphelin dans le bucket
            logger.error("Error deleting file from storage: %s (%s)", path, e.detail)

    def delete_file(self, department: str, semester: str, subject: str, file_id: str) -> FileRecord:
        key = content_key(department, semester, subject)
        stored = self.kv.get(key)
        if stored is None:
            raise NotFoundError("Content not found")
        return self._delete_from(key, ContentCatalog.model_validate(stored), file_id)

    def _delete_from(self, key: str, catalog: ContentCatalog, file_id: str) -> FileRecord:
        record = remove_record(catalog, file_id)
        if record is None:
            raise NotFoundError()

        self._save(key, catalog)
        self.kv.delete(index_key(file_id))
        self._remove_blob(record.path)
        logger.info("File deleted: %s (id=%s)", record.path, file_id)
        return record

    def delete_file_by_id(self, file_id: str) -> FileRecord:
        """
        Suppression sans coordonnées : résolution via l'index fileId -> emplacement,
        puis parcours des catalogues pour les fichiers non indexés.
        """
        stored = self.kv.get(index_key(file_id))
        if stored is not None:
            loc = FileLocation.model_validate(stored)
            try:
                return self.delete_file(loc.department, loc.semester, loc.subject, file_id)
            except NotFoundError:
                logger.warning("Stale index entry for file %s, dropping it", file_id)
                self.kv.delete(index_key(file_id))

        for key, value in self.kv.get_by_prefix(CONTENT_PREFIX):
            catalog = ContentCatalog.model_validate(value)
            if any(r.id == file_id for r in catalog.all_records()):
                return self._delete_from(key, catalog, file_id)

        raise NotFoundError()
