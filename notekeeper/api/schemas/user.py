"""
Esquema público de la colección `user` (sin secretos).
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UserOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(alias="_id")
    full_name: str
    email: str
    created_on: str
