import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from starlette.status import HTTP_200_OK

from notes_portal.core.config import Settings
from notes_portal.core.deps import get_catalog_service, get_identity, get_settings_dep
from notes_portal.core.errors import ValidationError
from notes_portal.core.security import get_current_principal
from notes_portal.models.catalog import MessageResponse, Principal, SignupResponse, UploadResponse
from notes_portal.services.catalog import CatalogService
from notes_portal.services.identity import IdentityProvider

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin"])


@router.post("/admin/signup", response_model=SignupResponse)
def admin_signup(
    identity: IdentityProvider = Depends(get_identity),
    settings: Settings = Depends(get_settings_dep),
):
    """
    Crée le compte admin unique (idempotent : "déjà existant" = succès).
    """
    created = identity.create_user(
        settings.ADMIN_EMAIL,
        settings.ADMIN_PASSWORD,
        {"name": settings.ADMIN_NAME, "role": "admin"},
    )
    if not created:
        return SignupResponse(message="Admin user already exists", existing=True)
    logger.info("Admin user created: %s", settings.ADMIN_EMAIL)
    return SignupResponse(message="Admin user created successfully")


def _upload(
    catalog: CatalogService,
    file: Optional[UploadFile],
    department: str,
    semester: str,
    subject: str,
    contentType: str,
    module: Optional[str],
) -> UploadResponse:
    if file is None:
        raise ValidationError()
    record = catalog.upload_file(
        department,
        semester,
        subject,
        contentType,
        module,
        file.file.read(),
        file.filename,
        file.content_type or "application/octet-stream",
    )
    return UploadResponse(fileRecord=record)


@router.post("/admin/upload", response_model=UploadResponse)
def admin_upload(
    file: Optional[UploadFile] = File(None),
    department: str = Form(""),
    semester: str = Form(""),
    subject: str = Form(""),
    contentType: str = Form(""),
    module: Optional[str] = Form(None),
    catalog: CatalogService = Depends(get_catalog_service),
    _: Principal = Depends(get_current_principal),
):
    return _upload(catalog, file, department, semester, subject, contentType, module)


# Ancienne route conservée pour les clients existants
@router.post("/upload", response_model=UploadResponse)
def upload_compat(
    file: Optional[UploadFile] = File(None),
    department: str = Form(""),
    semester: str = Form(""),
    subject: str = Form(""),
    contentType: str = Form(""),
    module: Optional[str] = Form(None),
    catalog: CatalogService = Depends(get_catalog_service),
    _: Principal = Depends(get_current_principal),
):
    return _upload(catalog, file, department, semester, subject, contentType, module)


@router.delete(
    "/admin/delete/{department}/{semester}/{subject}/{file_id}",
    response_model=MessageResponse,
    status_code=HTTP_200_OK,
)
def admin_delete(
    department: str,
    semester: str,
    subject: str,
    file_id: str,
    catalog: CatalogService = Depends(get_catalog_service),
    _: Principal = Depends(get_current_principal),
):
    catalog.delete_file(department, semester, subject, file_id)
    return MessageResponse(message="File deleted successfully")


@router.delete("/delete/{file_id}", response_model=MessageResponse, status_code=HTTP_200_OK)
def delete_by_id(
    file_id: str,
    catalog: CatalogService = Depends(get_catalog_service),
    _: Principal = Depends(get_current_principal),
):
    catalog.delete_file_by_id(file_id)
    return MessageResponse(message="File deleted successfully")
