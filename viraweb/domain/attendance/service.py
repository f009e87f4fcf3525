"""Attendance service - Business logic for attendance tracking"""

import logging

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...error_messages import action_failure, not_found
from ...models import Attendance, User
from ...realtime import INSERT, UPDATE, publish_change
from ..financial.repository import FinancialRepository
from ..patients.repository import PatientRepository
from .repository import AttendanceRepository
from .schemas import AttendanceUpsert

logger = logging.getLogger(__name__)


class AttendanceService:

    def __init__(self, db: Session):
        self.db = db
        self.repo = AttendanceRepository()

    def _require_patient(self, patient_id: int, user: User) -> None:
        if not PatientRepository.get_patient_by_id(self.db, patient_id, user.id):
            raise not_found("patient")

    def list_for_patient(self, patient_id: int, user: User) -> list[Attendance]:
        self._require_patient(patient_id, user)
        try:
            return self.repo.get_for_patient(self.db, user.id, patient_id)
        except SQLAlchemyError as e:
            logger.error(f"❌ Attendance fetch failed for patient {patient_id}: {e}")
            raise HTTPException(status_code=500, detail=action_failure("attendance.fetch")) from e

    def upsert(self, data: AttendanceUpsert, user: User) -> Attendance:
        """Create or overwrite the patient's attendance for the day"""
        self._require_patient(data.patient_id, user)
        if data.payment_id is not None and not FinancialRepository.get_payment_by_id(
            self.db, data.payment_id, user.id
        ):
            raise not_found("payment")

        existed = self.repo.get_by_day(self.db, user.id, data.patient_id, data.session_date) is not None
        try:
            record = self.repo.upsert(
                self.db,
                user.id,
                data.patient_id,
                data.session_date,
                data.status,
                **data.model_dump(exclude_unset=True, include={"payment_id", "notes"}),
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            key = "attendance.update" if existed else "attendance.create"
            logger.error(f"❌ Attendance upsert failed for patient {data.patient_id}: {e}")
            raise HTTPException(status_code=500, detail=action_failure(key)) from e

        publish_change("attendance", user.id, UPDATE if existed else INSERT, record)
        return record

    def get_stats(self, patient_id: int, user: User) -> dict:
        records = self.list_for_patient(patient_id, user)
        total = len(records)
        counts = {status: 0 for status in ("present", "absent", "late", "cancelled")}
        for record in records:
            if record.status in counts:
                counts[record.status] += 1
        paid = sum(1 for r in records if r.payment_id is not None)

        return {
            "total": total,
            **counts,
            "paid": paid,
            "attendance_rate": round(counts["present"] / total * 100, 2) if total else 0.0,
        }
