"""Health (sin auth), salidas tipadas y estables."""
from fastapi import APIRouter, status

from notekeeper.api.schemas.health import HealthOut, PingOut, RootOut
from notekeeper.infrastructure.db.mongo_async import ping as mongo_ping

router = APIRouter(tags=["Health"])  # no prefix to keep paths stable


@router.get("/", response_model=RootOut, summary="Raíz")
async def root() -> RootOut:
    return RootOut(data="Hello")


@router.get("/ping", response_model=PingOut, summary="Ping básico")
async def ping() -> PingOut:
    return PingOut(message="pong")


@router.get("/health", status_code=status.HTTP_200_OK, response_model=HealthOut, summary="Salud básica")
async def health() -> HealthOut:
    return HealthOut(message="ok", ok=True, db=await mongo_ping())
