"""
Pydantic schemas for `note`, camelCase on the wire like the original client expects.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from notekeeper.services.note_service import NotePatch


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NoteCreate(_CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None
    tags: Optional[List[str]] = None


class NoteUpdate(_CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None
    tags: Optional[List[str]] = None
    # Any: a non-boolean value must reach the service untouched (and be ignored there)
    is_pinned: Any = None

    def to_patch(self) -> NotePatch:
        return NotePatch(
            title=self.title,
            content=self.content,
            tags=self.tags,
            is_pinned=self.is_pinned,
            present=frozenset(self.model_fields_set),
        )


class PinnedUpdate(_CamelModel):
    is_pinned: Any = None


class NoteOut(_CamelModel):
    id: str = Field(alias="_id")
    title: str
    content: str
    tags: List[str]
    is_pinned: bool
    user_id: str
    created_on: str

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "NoteOut":
        return cls(
            id=str(doc["_id"]),
            title=doc["title"],
            content=doc["content"],
            tags=list(doc.get("tags") or []),
            is_pinned=bool(doc.get("is_pinned", False)),
            user_id=str(doc["user_id"]),
            created_on=doc.get("created_on") or "",
        )

    def dump(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
