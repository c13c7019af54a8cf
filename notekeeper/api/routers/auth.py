"""Rutas de autenticación: registro, login, perfil y logout."""
from fastapi import APIRouter, Depends, Request, status

from notekeeper.api.deps import get_current_identity
from notekeeper.api.schemas.auth import LoginPayload, RegisterPayload
from notekeeper.api.schemas.user import UserOut
from notekeeper.core import rate_limit
from notekeeper.core.config import settings
from notekeeper.core.exceptions import RateLimitedError
from notekeeper.services import auth_service as service
from notekeeper.services.auth_validator import Identity
from notekeeper.services.token_service import create_access_token

router = APIRouter(tags=["Auth"])


@router.post(
    "/create-account",
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar usuario",
    description="Crea la cuenta y devuelve un access token.",
)
async def create_account(payload: RegisterPayload):
    user = await service.register_user(
        full_name=payload.full_name, email=payload.email, password=payload.password
    )
    return {
        "error": False,
        "message": "Account created successfully",
        "accessToken": create_access_token(user=user),
    }


# Ruta con la errata que usa el cliente original
router.add_api_route(
    "/create-acoount",
    create_account,
    methods=["POST"],
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)


@router.post(
    "/login",
    response_model=dict,
    summary="Login local",
    description="Valida email + password y emite un access token.",
)
async def login(payload: LoginPayload, request: Request):
    # Rate limit por IP
    ip = request.client.host if request.client else ""
    if not rate_limit.allow((ip, "/login"), limit=settings.login_rate_per_min):
        raise RateLimitedError()
    user = await service.authenticate_user(email=payload.email, password=payload.password)
    return {
        "error": False,
        "message": "Login successful.",
        "email": user["email"],
        "accessToken": create_access_token(user=user),
    }


@router.get(
    "/get-user",
    response_model=dict,
    summary="Perfil del usuario",
    description="Devuelve el perfil redactado del usuario autenticado.",
)
async def get_user(identity: Identity = Depends(get_current_identity)):
    profile = await service.get_profile(identity.user_id)
    return {"error": False, "user": UserOut(**profile).model_dump(by_alias=True), "message": ""}


@router.post(
    "/logout",
    response_model=dict,
    summary="Cerrar todas las sesiones",
    description="Revoca todos los access tokens del usuario (incrementa token_version).",
)
async def logout(identity: Identity = Depends(get_current_identity)):
    await service.logout_all(identity.user_id)
    return {"error": False, "message": "All sessions revoked."}
