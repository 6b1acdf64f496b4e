from __future__ import annotations

import logging
import time
import uuid
from typing import Dict
from urllib.parse import quote

import httpx

from notes_portal.core.errors import UpstreamError
from notes_portal.services.supabase import send

logger = logging.getLogger(__name__)


class BlobStore:
    """
    Stockage objet des fichiers (adressés par chemin dans un bucket privé).
    """

    def ensure_bucket(self) -> None:
        pass

    def upload(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        raise NotImplementedError

    def create_signed_url(self, path: str, expires_in: int) -> str:
        raise NotImplementedError

    def remove(self, path: str) -> None:
        raise NotImplementedError


class MemoryBlobStore(BlobStore):
    def __init__(self, bucket: str = "documents"):
        self.bucket = bucket
        self.objects: Dict[str, bytes] = {}

    def upload(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        if path in self.objects:
            raise UpstreamError("Failed to upload file", detail=f"{path} already exists")
        self.objects[path] = data

    def create_signed_url(self, path: str, expires_in: int) -> str:
        if path not in self.objects:
            raise UpstreamError("Failed to create download URL", detail=f"{path} not found")
        expires_at = int(time.time()) + expires_in
        return (
            f"memory://{self.bucket}/{quote(path)}"
            f"?token={uuid.uuid4().hex}&expires={expires_at}"
        )

    def remove(self, path: str) -> None:
        self.objects.pop(path, None)


class SupabaseBlobStore(BlobStore):
    """
    API Storage de Supabase (/storage/v1).
    """

    def __init__(self, client: httpx.Client, bucket: str):
        self.client = client
        self.bucket = bucket

    def _object_url(self, path: str) -> str:
        return f"/storage/v1/object/{self.bucket}/{quote(path)}"

    def ensure_bucket(self) -> None:
        resp = send(
            lambda: self.client.get("/storage/v1/bucket"),
            "Failed to list storage buckets",
        )
        if any(b.get("name") == self.bucket for b in resp.json()):
            return
        send(
            lambda: self.client.post(
                "/storage/v1/bucket",
                json={"id": self.bucket, "name": self.bucket, "public": False},
            ),
            "Failed to create storage bucket",
        )
        logger.info("Created storage bucket: %s", self.bucket)

    def upload(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        send(
            lambda: self.client.post(
                self._object_url(path),
                content=data,
                headers={"Content-Type": content_type, "x-upsert": "false"},
            ),
            "Failed to upload file",
        )

    def create_signed_url(self, path: str, expires_in: int) -> str:
        resp = send(
            lambda: self.client.post(
                f"/storage/v1/object/sign/{self.bucket}/{quote(path)}",
                json={"expiresIn": expires_in},
            ),
            "Failed to create download URL",
        )
        signed = resp.json().get("signedURL") or resp.json().get("signedUrl")
        if not signed:
            raise UpstreamError("Failed to create download URL", detail="no signedURL in response")
        if signed.startswith("http"):
            return signed
        base = str(self.client.base_url).rstrip("/")
        return f"{base}/storage/v1{signed}"

    def remove(self, path: str) -> None:
        send(
            lambda: self.client.request(
                "DELETE",
                f"/storage/v1/object/{self.bucket}",
                json={"prefixes": [path]},
            ),
            "Failed to delete file from storage",
        )
