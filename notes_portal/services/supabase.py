from __future__ import annotations

from typing import Callable

import httpx

from notes_portal.core.config import Settings
from notes_portal.core.errors import UpstreamError


def build_http_client(settings: Settings, transport: httpx.BaseTransport | None = None) -> httpx.Client:
    """
    Client HTTP partagé vers le projet Supabase (clé service role).
    `transport` permet d'injecter un httpx.MockTransport dans les tests.
    """
    key = settings.SUPABASE_SERVICE_ROLE_KEY
    return httpx.Client(
        base_url=settings.SUPABASE_URL.rstrip("/"),
        timeout=settings.HTTP_TIMEOUT,
        headers={"apikey": key, "Authorization": f"Bearer {key}"},
        transport=transport,
    )


def send(call: Callable[[], httpx.Response], message: str) -> httpx.Response:
    """
    Exécute un appel HTTP et convertit toute erreur réseau / statut >= 400
    en UpstreamError (message générique, détail en log).
    """
    try:
        resp = call()
    except httpx.HTTPError as e:
        raise UpstreamError(message, detail=f"{type(e).__name__}: {e}") from e

    if resp.is_error:
        raise UpstreamError(message, detail=f"HTTP {resp.status_code}: {resp.text[:500]}")
    return resp
