from fastapi import APIRouter, Depends

from notes_portal.core.deps import get_identity
from notes_portal.core.security import get_bearer_token, get_current_principal
from notes_portal.models.catalog import LoginRequest, LoginResponse, MessageResponse, Principal
from notes_portal.services.identity import IdentityProvider

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, identity: IdentityProvider = Depends(get_identity)):
    token, user = identity.sign_in(payload.email, payload.password)
    return LoginResponse(access_token=token, user=user)


@router.post("/logout", response_model=MessageResponse)
def logout(
    token: str = Depends(get_bearer_token),
    identity: IdentityProvider = Depends(get_identity),
    _: Principal = Depends(get_current_principal),
):
    identity.sign_out(token)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=Principal)
def me(current: Principal = Depends(get_current_principal)):
    return current
