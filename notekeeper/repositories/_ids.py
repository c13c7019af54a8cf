"""Conversión de ids de la API a ObjectId."""
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId


def to_object_id(value: str) -> Optional[ObjectId]:
    """ObjectId para `value`, o None si no es un id válido (se trata como inexistente)."""
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None
