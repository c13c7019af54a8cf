"""Schemas para endpoints de health; misma envoltura {error, message} que el resto de la API."""
from pydantic import BaseModel


class Envelope(BaseModel):
    error: bool = False
    message: str = ""


class RootOut(Envelope):
    data: str


class PingOut(Envelope):
    pass


class HealthOut(Envelope):
    ok: bool
    db: bool
