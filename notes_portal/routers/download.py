from fastapi import APIRouter, Depends

from notes_portal.core.deps import get_catalog_service
from notes_portal.models.catalog import DownloadRequest, DownloadResponse
from notes_portal.services.catalog import CatalogService

router = APIRouter(prefix="/download", tags=["download"])


@router.post("", response_model=DownloadResponse)
def download_url(
    payload: DownloadRequest,
    catalog: CatalogService = Depends(get_catalog_service),
):
    return DownloadResponse(url=catalog.get_download_url(payload.filePath))


# Le chemin arrive encodé (%2F) ou brut : `:path` accepte les deux
@router.get("/{file_path:path}", response_model=DownloadResponse)
def download_url_by_path(
    file_path: str,
    catalog: CatalogService = Depends(get_catalog_service),
):
    return DownloadResponse(url=catalog.get_download_url(file_path))
