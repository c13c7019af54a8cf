"""
Dependencias reutilizables para routers (FastAPI Depends).

- Autenticación: extrae y valida el bearer token, devuelve la identidad actual.
- Mantener esta capa delgada: la lógica vive en `services/auth_validator.py`.
"""
from typing import Optional

from fastapi import Header, Request

from notekeeper.services.auth_validator import Identity, authorize


async def get_current_identity(request: Request, authorization: Optional[str] = Header(default=None)) -> Identity:
    identity = await authorize(authorization)
    request.state.user_id = identity.user_id
    return identity
