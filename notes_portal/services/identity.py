from __future__ import annotations

import logging
import uuid
from typing import Dict, Tuple

import httpx

from notes_portal.core.errors import AuthError, UpstreamError
from notes_portal.models.catalog import Principal
from notes_portal.services.supabase import send

logger = logging.getLogger(__name__)


class IdentityProvider:
    """
    Service d'authentification externe : émission / vérification de tokens,
    déconnexion, création du compte admin.
    """

    def get_user(self, token: str) -> Principal:
        raise NotImplementedError

    def sign_in(self, email: str, password: str) -> Tuple[str, Principal]:
        raise NotImplementedError

    def sign_out(self, token: str) -> None:
        raise NotImplementedError

    def create_user(self, email: str, password: str, metadata: dict) -> bool:
        """Retourne False si le compte existe déjà."""
        raise NotImplementedError


class MemoryIdentityProvider(IdentityProvider):
    def __init__(self):
        self.users: Dict[str, Tuple[str, Principal]] = {}
        self.tokens: Dict[str, Principal] = {}

    def get_user(self, token: str) -> Principal:
        principal = self.tokens.get(token)
        if principal is None:
            raise AuthError()
        return principal

    def sign_in(self, email: str, password: str) -> Tuple[str, Principal]:
        entry = self.users.get(email.lower())
        if not entry or entry[0] != password:
            raise AuthError("Invalid login credentials")
        token = uuid.uuid4().hex
        self.tokens[token] = entry[1]
        return token, entry[1]

    def sign_out(self, token: str) -> None:
        self.tokens.pop(token, None)

    def create_user(self, email: str, password: str, metadata: dict) -> bool:
        key = email.lower()
        if key in self.users:
            return False
        principal = Principal(id=str(uuid.uuid4()), email=key, metadata=dict(metadata))
        self.users[key] = (password, principal)
        return True


def _principal(user: dict) -> Principal:
    return Principal(
        id=str(user.get("id", "")),
        email=user.get("email"),
        metadata=user.get("user_metadata") or {},
    )


class SupabaseIdentityProvider(IdentityProvider):
    """
    GoTrue (/auth/v1). Les appels "utilisateur" passent la clé publique
    en `apikey` et le token de l'utilisateur en Bearer.
    """

    def __init__(self, client: httpx.Client, anon_key: str = ""):
        self.client = client
        self.anon_key = anon_key

    def _user_headers(self, token: str) -> dict:
        headers = {"Authorization": f"Bearer {token}"}
        if self.anon_key:
            headers["apikey"] = self.anon_key
        return headers

    def get_user(self, token: str) -> Principal:
        try:
            resp = self.client.get("/auth/v1/user", headers=self._user_headers(token))
        except httpx.HTTPError as e:
            raise UpstreamError("Failed to verify token", detail=str(e)) from e

        if resp.status_code in (400, 401, 403, 404):
            logger.warning("Authorization error while verifying access: %s", resp.text[:200])
            raise AuthError()
        if resp.is_error:
            raise UpstreamError("Failed to verify token", detail=f"HTTP {resp.status_code}: {resp.text[:500]}")
        return _principal(resp.json())

    def sign_in(self, email: str, password: str) -> Tuple[str, Principal]:
        headers = {"apikey": self.anon_key} if self.anon_key else {}
        try:
            resp = self.client.post(
                "/auth/v1/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise UpstreamError("Login failed", detail=str(e)) from e

        if resp.status_code in (400, 401):
            raise AuthError("Invalid login credentials")
        if resp.is_error:
            raise UpstreamError("Login failed", detail=f"HTTP {resp.status_code}: {resp.text[:500]}")
        data = resp.json()
        return data["access_token"], _principal(data.get("user") or {})

    def sign_out(self, token: str) -> None:
        send(
            lambda: self.client.post("/auth/v1/logout", headers=self._user_headers(token)),
            "Logout failed",
        )

    def create_user(self, email: str, password: str, metadata: dict) -> bool:
        try:
            resp = self.client.post(
                "/auth/v1/admin/users",
                json={
                    "email": email,
                    "password": password,
                    "user_metadata": metadata,
                    # Pas de serveur mail configuré : email confirmé d'office
                    "email_confirm": True,
                },
            )
        except httpx.HTTPError as e:
            raise UpstreamError("Internal server error during admin signup", detail=str(e)) from e

        if resp.is_error:
            body = resp.text
            if "email_exists" in body or "already been registered" in body:
                return False
            raise UpstreamError(
                "Internal server error during admin signup",
                detail=f"HTTP {resp.status_code}: {body[:500]}",
            )
        return True
