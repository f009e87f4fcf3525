"""Note router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import NoteCreate, NoteResponse, NoteUpdate
from .service import NoteService

router = APIRouter(prefix="/api/notes", tags=["Notes"])


def get_note_service(db: Session = Depends(get_db)) -> NoteService:
    return NoteService(db)


@router.get("", response_model=list[NoteResponse])
async def get_notes(
    current_user: User = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    return service.get_notes(current_user)


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: int,
    current_user: User = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    return service.get_note(note_id, current_user)


@router.post("", response_model=NoteResponse, status_code=201)
async def create_note(
    data: NoteCreate,
    current_user: User = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    return service.create_note(data, current_user)


@router.patch("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: int,
    data: NoteUpdate,
    current_user: User = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    return service.update_note(note_id, data, current_user)


@router.delete("/{note_id}")
async def delete_note(
    note_id: int,
    current_user: User = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
):
    return service.delete_note(note_id, current_user)
