from typing import List

from fastapi import APIRouter, Depends

from notes_portal.core.security import get_current_principal
from notes_portal.core.deps import get_catalog_service
from notes_portal.models.catalog import (
    AddSubjectRequest,
    ContentCatalog,
    ContentStructure,
    MessageResponse,
    Principal,
)
from notes_portal.services.catalog import CatalogService

router = APIRouter(tags=["content"])


@router.get("/content/structure", response_model=ContentStructure)
def content_structure(catalog: CatalogService = Depends(get_catalog_service)):
    return catalog.get_structure()


@router.get("/content/subjects/{department}/{semester}", response_model=List[str])
def list_subjects(
    department: str,
    semester: str,
    catalog: CatalogService = Depends(get_catalog_service),
):
    return catalog.list_subjects(department, semester)


@router.get("/content/{department}/{semester}/{subject}", response_model=ContentCatalog)
def get_content(
    department: str,
    semester: str,
    subject: str,
    catalog: CatalogService = Depends(get_catalog_service),
):
    return catalog.get_catalog(department, semester, subject)


@router.post("/subjects", response_model=MessageResponse)
def add_subject(
    payload: AddSubjectRequest,
    catalog: CatalogService = Depends(get_catalog_service),
    _: Principal = Depends(get_current_principal),
):
    catalog.add_subject(payload.department, payload.semester, payload.subject)
    return MessageResponse(message="Subject added successfully")
