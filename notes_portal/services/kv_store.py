from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional, Tuple

import httpx

from notes_portal.services.supabase import send


class KeyValueStore:
    """
    Stockage clé -> valeur JSON (catalogues, listes de matières, index).
    """

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def get_by_prefix(self, prefix: str) -> List[Tuple[str, Any]]:
        raise NotImplementedError


class MemoryKVStore(KeyValueStore):
    """
    Version en mémoire (dev local / tests). Les valeurs sont copiées
    pour se comporter comme un stockage sérialisé.
    """

    def __init__(self):
        self.data: Dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self.data.get(key))

    def set(self, key: str, value: Any) -> None:
        self.data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def get_by_prefix(self, prefix: str) -> List[Tuple[str, Any]]:
        return [
            (k, copy.deepcopy(v))
            for k, v in sorted(self.data.items())
            if k.startswith(prefix)
        ]


class SupabaseKVStore(KeyValueStore):
    """
    Table PostgREST `key text primary key, value jsonb`.
    """

    def __init__(self, client: httpx.Client, table: str):
        self.client = client
        self.path = f"/rest/v1/{table}"

    def get(self, key: str) -> Optional[Any]:
        resp = send(
            lambda: self.client.get(self.path, params={"key": f"eq.{key}", "select": "value"}),
            "Failed to read from key-value store",
        )
        rows = resp.json()
        return rows[0]["value"] if rows else None

    def set(self, key: str, value: Any) -> None:
        send(
            lambda: self.client.post(
                self.path,
                json={"key": key, "value": value},
                headers={"Prefer": "resolution=merge-duplicates"},
            ),
            "Failed to write to key-value store",
        )

    def delete(self, key: str) -> None:
        send(
            lambda: self.client.delete(self.path, params={"key": f"eq.{key}"}),
            "Failed to delete from key-value store",
        )

    def get_by_prefix(self, prefix: str) -> List[Tuple[str, Any]]:
        resp = send(
            lambda: self.client.get(
                self.path,
                params={"key": f"like.{prefix}*", "select": "key,value"},
            ),
            "Failed to scan key-value store",
        )
        # LIKE traite "_" comme joker : on refiltre côté Python
        return [
            (row["key"], row["value"])
            for row in resp.json()
            if row["key"].startswith(prefix)
        ]
