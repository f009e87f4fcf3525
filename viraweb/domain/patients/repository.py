"""Patient repository - Database operations for patients"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Patient


class PatientRepository:
    """Repository for patient database operations"""

    @staticmethod
    def get_patients(db: Session, user_id: int) -> list[Patient]:
        return (
            db.query(Patient)
            .filter(Patient.user_id == user_id)
            .order_by(Patient.created_at.desc(), Patient.id.desc())
            .all()
        )

    @staticmethod
    def get_patient_by_id(db: Session, patient_id: int, user_id: int) -> Optional[Patient]:
        return (
            db.query(Patient)
            .filter(Patient.id == patient_id, Patient.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_overdue_patients(db: Session, user_id: int, today: date) -> list[Patient]:
        return (
            db.query(Patient)
            .filter(
                Patient.user_id == user_id,
                Patient.payment_status == "overdue",
                Patient.payment_due_date < today,
            )
            .all()
        )

    @staticmethod
    def get_all_overdue_patients(db: Session, today: date) -> list[Patient]:
        """Overdue patients across all tenants (used by the payment reminder job)"""
        return (
            db.query(Patient)
            .filter(Patient.payment_status == "overdue", Patient.payment_due_date < today)
            .all()
        )

    @staticmethod
    def create_patient(db: Session, user_id: int, **patient_data) -> Patient:
        patient = Patient(user_id=user_id, **patient_data)
        db.add(patient)
        db.commit()
        db.refresh(patient)
        return patient

    @staticmethod
    def update_patient(db: Session, patient: Patient, **updates) -> Patient:
        for key, value in updates.items():
            if hasattr(patient, key):
                setattr(patient, key, value)
        db.commit()
        db.refresh(patient)
        return patient

    @staticmethod
    def delete_patient(db: Session, patient: Patient) -> None:
        db.delete(patient)
        db.commit()
