from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from notes_portal.core.deps import get_identity
from notes_portal.core.errors import AuthError
from notes_portal.models.catalog import Principal
from notes_portal.services.identity import IdentityProvider

bearer = HTTPBearer(auto_error=False)


def get_bearer_token(creds: HTTPAuthorizationCredentials | None = Depends(bearer)) -> str:
    if not creds or not creds.credentials:
        raise AuthError("No authorization token provided")
    return creds.credentials


def get_current_principal(
    token: str = Depends(get_bearer_token),
    identity: IdentityProvider = Depends(get_identity),
) -> Principal:
    """
    Vérifie le token auprès du service d'identité.
    Pas de contrôle de rôle : tout compte valide passe.
    """
    return identity.get_user(token)
