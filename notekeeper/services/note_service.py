"""
Service layer for notes: validation and patch rules over the owner-scoped repo.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from notekeeper.core.exceptions import NotFoundError, ValidationError
from notekeeper.repositories import note_repo as repo

_log = logging.getLogger("notekeeper.notes")


@dataclass
class NotePatch:
    """Partial update; only names listed in `present` were sent by the caller."""

    title: Optional[str] = None
    content: Optional[str] = None
    tags: Optional[List[str]] = None
    is_pinned: Any = None
    present: frozenset = field(default_factory=frozenset)

    def has(self, name: str) -> bool:
        return name in self.present


def normalize_tags(tags: Optional[List[str]]) -> List[str]:
    """Tags as sent, minus exact duplicates (first occurrence wins)."""
    uniq: List[str] = []
    seen = set()
    for t in tags or []:
        if t not in seen:
            seen.add(t)
            uniq.append(t)
    return uniq


async def create_note(owner: str, *, title: Optional[str], content: Optional[str], tags: Optional[List[str]] = None) -> Dict[str, Any]:
    if not title or not content:
        raise ValidationError("Title and Content are required.")
    note = await repo.insert_note(user_id=owner, title=title, content=content, tags=normalize_tags(tags))
    _log.info("note created id=%s owner=%s", note["_id"], owner)
    return note


async def update_note(owner: str, note_id: str, patch: NotePatch) -> Dict[str, Any]:
    # Empty strings / empty lists never overwrite; isPinned only as a real bool.
    updates: Dict[str, Any] = {}
    if patch.has("title") and patch.title:
        updates["title"] = patch.title
    if patch.has("content") and patch.content:
        updates["content"] = patch.content
    if patch.has("tags") and patch.tags:
        updates["tags"] = normalize_tags(patch.tags)
    if patch.has("is_pinned") and isinstance(patch.is_pinned, bool):
        updates["is_pinned"] = patch.is_pinned

    note = await repo.update_owned_note(note_id, owner, updates)
    if note is None:
        raise NotFoundError("Note not found.")
    return note


async def set_note_pinned(owner: str, note_id: str, is_pinned: Any) -> Dict[str, Any]:
    note = await repo.update_owned_note(note_id, owner, {"is_pinned": bool(is_pinned)})
    if note is None:
        raise NotFoundError("Note not found")
    return note


async def delete_note(owner: str, note_id: str) -> None:
    if not await repo.delete_owned_note(note_id, owner):
        raise NotFoundError("Note not found.")
    _log.info("note deleted id=%s owner=%s", note_id, owner)


async def list_notes(owner: str) -> List[Dict[str, Any]]:
    return await repo.list_notes(owner)


async def search_notes(owner: str, query: Optional[str]) -> List[Dict[str, Any]]:
    if not query:
        raise ValidationError("Query is required")
    return await repo.search_notes(owner, query)
