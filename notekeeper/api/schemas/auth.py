"""
Esquemas Pydantic para operaciones de autenticación.

- Los campos son opcionales a nivel de esquema: la obligatoriedad la decide el
  servicio para responder 400 con el mensaje adecuado.
- Nombres en camelCase en el wire (`fullName`), snake_case en Python.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterPayload(_CamelModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginPayload(_CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None
