"""Repo of the `note` collection.

Every read/write filters by note id AND owner in one query, so a note owned by
somebody else behaves exactly like a missing one.
"""
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument

from notekeeper.core.async_utils import with_timeout
from notekeeper.infrastructure.db.mongo_async import get_async_db
from notekeeper.repositories._ids import to_object_id

COLLECTION = "note"

# Pinned first, newest first among equals
LIST_SORT = [("is_pinned", -1), ("created_on", -1)]


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _owned(note_id: str, user_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(note_id)
    if oid is None:
        return None
    return {"_id": oid, "user_id": str(user_id)}


async def insert_note(*, user_id: str, title: str, content: str, tags: List[str]) -> Dict[str, Any]:
    """Inserts a note with defaults and returns the stored document."""
    doc = {
        "title": title,
        "content": content,
        "tags": list(tags),
        "is_pinned": False,
        "user_id": str(user_id),
        "created_on": _now_iso(),
    }
    await with_timeout(get_async_db()[COLLECTION].insert_one(doc), op="note.insert")
    return doc


async def find_owned_note(note_id: str, user_id: str) -> Optional[Dict[str, Any]]:
    filtro = _owned(note_id, user_id)
    if filtro is None:
        return None
    return await with_timeout(get_async_db()[COLLECTION].find_one(filtro), op="note.find")


async def update_owned_note(note_id: str, user_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Applies `$set` updates and returns the note after the write (None if not owned)."""
    if not updates:
        return await find_owned_note(note_id, user_id)
    filtro = _owned(note_id, user_id)
    if filtro is None:
        return None
    return await with_timeout(
        get_async_db()[COLLECTION].find_one_and_update(
            filtro, {"$set": updates}, return_document=ReturnDocument.AFTER
        ),
        op="note.update",
    )


async def delete_owned_note(note_id: str, user_id: str) -> bool:
    filtro = _owned(note_id, user_id)
    if filtro is None:
        return False
    res = await with_timeout(get_async_db()[COLLECTION].delete_one(filtro), op="note.delete")
    return res.deleted_count > 0


async def list_notes(user_id: str) -> List[Dict[str, Any]]:
    cursor = get_async_db()[COLLECTION].find({"user_id": str(user_id)}).sort(LIST_SORT)
    return await with_timeout(cursor.to_list(length=None), op="note.list")


async def search_notes(user_id: str, query: str) -> List[Dict[str, Any]]:
    """Case-insensitive literal substring match on title or content."""
    pattern = {"$regex": re.escape(query), "$options": "i"}
    filtro = {
        "user_id": str(user_id),
        "$or": [{"title": pattern}, {"content": pattern}],
    }
    cursor = get_async_db()[COLLECTION].find(filtro).sort(LIST_SORT)
    return await with_timeout(cursor.to_list(length=None), op="note.search")
