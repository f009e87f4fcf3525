"""Note repository - Database operations for personal notes"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import UserNote


class NoteRepository:

    @staticmethod
    def get_notes(db: Session, user_id: int) -> list[UserNote]:
        return (
            db.query(UserNote)
            .filter(UserNote.user_id == user_id)
            .order_by(UserNote.updated_at.desc(), UserNote.id.desc())
            .all()
        )

    @staticmethod
    def get_note_by_id(db: Session, note_id: int, user_id: int) -> Optional[UserNote]:
        return db.query(UserNote).filter(UserNote.id == note_id, UserNote.user_id == user_id).first()

    @staticmethod
    def create_note(db: Session, user_id: int, **data) -> UserNote:
        note = UserNote(user_id=user_id, **data)
        db.add(note)
        db.commit()
        db.refresh(note)
        return note

    @staticmethod
    def update_note(db: Session, note: UserNote, **updates) -> UserNote:
        for key, value in updates.items():
            if hasattr(note, key):
                setattr(note, key, value)
        db.commit()
        db.refresh(note)
        return note

    @staticmethod
    def delete_note(db: Session, note: UserNote) -> None:
        db.delete(note)
        db.commit()
