"""Note service"""

from sqlalchemy.orm import Session

from ...error_messages import not_found
from ...models import User, UserNote
from ...realtime import DELETE, INSERT, UPDATE, publish_change
from .repository import NoteRepository
from .schemas import NoteCreate, NoteUpdate


class NoteService:

    def __init__(self, db: Session):
        self.db = db
        self.repo = NoteRepository()

    def get_notes(self, user: User) -> list[UserNote]:
        return self.repo.get_notes(self.db, user.id)

    def get_note(self, note_id: int, user: User) -> UserNote:
        note = self.repo.get_note_by_id(self.db, note_id, user.id)
        if not note:
            raise not_found("note")
        return note

    def create_note(self, data: NoteCreate, user: User) -> UserNote:
        note = self.repo.create_note(self.db, user.id, **data.model_dump())
        publish_change("user_notes", user.id, INSERT, note)
        return note

    def update_note(self, note_id: int, data: NoteUpdate, user: User) -> UserNote:
        note = self.repo.update_note(
            self.db, self.get_note(note_id, user), **data.model_dump(exclude_unset=True)
        )
        publish_change("user_notes", user.id, UPDATE, note)
        return note

    def delete_note(self, note_id: int, user: User) -> dict:
        note = self.get_note(note_id, user)
        snapshot = {"id": note.id}
        self.repo.delete_note(self.db, note)
        publish_change("user_notes", user.id, DELETE, snapshot)
        return {"message": "Nota removida"}
