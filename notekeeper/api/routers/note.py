"""
Endpoints for the authenticated user's notes. Every route runs behind the access guard.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from notekeeper.api.deps import get_current_identity
from notekeeper.api.schemas.note import NoteCreate, NoteOut, NoteUpdate, PinnedUpdate
from notekeeper.services import note_service as service
from notekeeper.services.auth_validator import Identity
from notekeeper.services.note_service import NotePatch

router = APIRouter(tags=["Note"], dependencies=[Depends(get_current_identity)])


@router.post("/add-note", response_model=dict, summary="Create note")
async def add_note(payload: NoteCreate, identity: Identity = Depends(get_current_identity)):
    note = await service.create_note(
        identity.user_id, title=payload.title, content=payload.content, tags=payload.tags
    )
    return {"error": False, "note": NoteOut.from_doc(note).dump(), "message": "Note added successfully."}


@router.put("/edit-note/{note_id}", response_model=dict, summary="Edit note")
async def edit_note(
    note_id: str,
    payload: Optional[NoteUpdate] = None,
    identity: Identity = Depends(get_current_identity),
):
    # Missing body is an empty patch
    patch = payload.to_patch() if payload else NotePatch()
    note = await service.update_note(identity.user_id, note_id, patch)
    return {"error": False, "note": NoteOut.from_doc(note).dump(), "message": "Note updated successfully."}


@router.put("/update-note-pinned/{note_id}", response_model=dict, summary="Pin / unpin note")
async def update_note_pinned(
    note_id: str,
    payload: Optional[PinnedUpdate] = None,
    identity: Identity = Depends(get_current_identity),
):
    # Missing body means isPinned=false
    is_pinned = payload.is_pinned if payload else None
    await service.set_note_pinned(identity.user_id, note_id, is_pinned)
    return {"error": False, "message": "Pinned status updated"}


@router.delete("/delete-note/{note_id}", response_model=dict, summary="Delete note")
async def delete_note(note_id: str, identity: Identity = Depends(get_current_identity)):
    await service.delete_note(identity.user_id, note_id)
    return {"error": False, "message": "Note deleted successfully"}


@router.get("/get-all-notes", response_model=dict, summary="List notes (pinned first)")
async def get_all_notes(identity: Identity = Depends(get_current_identity)):
    notes = await service.list_notes(identity.user_id)
    return {
        "error": False,
        "notes": [NoteOut.from_doc(n).dump() for n in notes],
        "message": "All notes fetched successfully.",
    }


@router.get("/search-notes", response_model=dict, summary="Search notes by title or content")
async def search_notes(
    query: Optional[str] = Query(default=None),
    identity: Identity = Depends(get_current_identity),
):
    notes = await service.search_notes(identity.user_id, query)
    return {
        "error": False,
        "notes": [NoteOut.from_doc(n).dump() for n in notes],
        "message": "Matching notes found.",
    }
