"""Attendance repository - Database operations for attendance records"""

from datetime import date
from typing import Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from ...models import Attendance

CONFLICT_COLUMNS = ["user_id", "patient_id", "session_date"]


def _dialect_insert(db: Session):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise NotImplementedError(f"Attendance upsert not supported on {dialect}")


class AttendanceRepository:
    """Repository for attendance database operations"""

    @staticmethod
    def get_for_patient(db: Session, user_id: int, patient_id: int) -> list[Attendance]:
        return (
            db.query(Attendance)
            .filter(Attendance.user_id == user_id, Attendance.patient_id == patient_id)
            .order_by(Attendance.session_date.desc())
            .all()
        )

    @staticmethod
    def get_by_id(db: Session, attendance_id: int, user_id: int) -> Optional[Attendance]:
        return (
            db.query(Attendance)
            .filter(Attendance.id == attendance_id, Attendance.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_by_day(db: Session, user_id: int, patient_id: int, session_date: date) -> Optional[Attendance]:
        return (
            db.query(Attendance)
            .filter(
                Attendance.user_id == user_id,
                Attendance.patient_id == patient_id,
                Attendance.session_date == session_date,
            )
            .first()
        )

    @staticmethod
    def upsert(
        db: Session,
        user_id: int,
        patient_id: int,
        session_date: date,
        status: str,
        **fields,
    ) -> Attendance:
        """
        Single INSERT ... ON CONFLICT DO UPDATE on (user_id, patient_id, session_date),
        so concurrent writers for the same day never create a second row.

        `fields` holds the optional columns (payment_id, notes) the caller sent;
        columns left out keep their stored value on conflict.
        """
        insert = _dialect_insert(db)
        stmt = insert(Attendance).values(
            user_id=user_id,
            patient_id=patient_id,
            session_date=session_date,
            status=status,
            **fields,
        )
        updates = {"status": stmt.excluded.status, "updated_at": func.now()}
        for column in fields:
            updates[column] = stmt.excluded[column]
        stmt = stmt.on_conflict_do_update(index_elements=CONFLICT_COLUMNS, set_=updates)
        db.execute(stmt)
        db.commit()

        record = AttendanceRepository.get_by_day(db, user_id, patient_id, session_date)
        db.refresh(record)
        return record
