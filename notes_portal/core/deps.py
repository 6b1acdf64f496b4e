from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import httpx
from fastapi import Request

from notes_portal.core.config import Settings, get_settings
from notes_portal.services.blob_store import BlobStore, MemoryBlobStore, SupabaseBlobStore
from notes_portal.services.catalog import CatalogService
from notes_portal.services.identity import IdentityProvider, MemoryIdentityProvider, SupabaseIdentityProvider
from notes_portal.services.kv_store import KeyValueStore, MemoryKVStore, SupabaseKVStore
from notes_portal.services.supabase import build_http_client


@dataclass
class Backends:
    kv: KeyValueStore
    blobs: BlobStore
    identity: IdentityProvider
    clients: List[httpx.Client] = field(default_factory=list)

    def close(self) -> None:
        for client in self.clients:
            client.close()


def build_backends(settings: Settings) -> Backends:
    """
    Instancie les services externes selon BACKEND ("supabase" ou "memory").
    """
    if settings.BACKEND == "memory":
        return Backends(
            kv=MemoryKVStore(),
            blobs=MemoryBlobStore(settings.STORAGE_BUCKET),
            identity=MemoryIdentityProvider(),
        )
    if settings.BACKEND != "supabase":
        raise ValueError(f"Unknown BACKEND: {settings.BACKEND}")

    client = build_http_client(settings)
    return Backends(
        kv=SupabaseKVStore(client, settings.KV_TABLE),
        blobs=SupabaseBlobStore(client, settings.STORAGE_BUCKET),
        identity=SupabaseIdentityProvider(client, settings.SUPABASE_ANON_KEY),
        clients=[client],
    )


def get_settings_dep(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_backends(request: Request) -> Backends:
    return request.app.state.backends


def get_identity(request: Request) -> IdentityProvider:
    return get_backends(request).identity


def get_catalog_service(request: Request) -> CatalogService:
    """
    Fournit le service catalogue en dépendance (DI).
    """
    backends = get_backends(request)
    return CatalogService(backends.kv, backends.blobs, get_settings_dep(request))
