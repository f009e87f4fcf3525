"""Professional repository - Database operations for professionals"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Professional


class ProfessionalRepository:

    @staticmethod
    def get_professionals(db: Session, user_id: int) -> list[Professional]:
        return (
            db.query(Professional)
            .filter(Professional.user_id == user_id)
            .order_by(Professional.name.asc())
            .all()
        )

    @staticmethod
    def get_professional_by_id(db: Session, professional_id: int, user_id: int) -> Optional[Professional]:
        return (
            db.query(Professional)
            .filter(Professional.id == professional_id, Professional.user_id == user_id)
            .first()
        )

    @staticmethod
    def create_professional(db: Session, user_id: int, **data) -> Professional:
        professional = Professional(user_id=user_id, **data)
        db.add(professional)
        db.commit()
        db.refresh(professional)
        return professional

    @staticmethod
    def update_professional(db: Session, professional: Professional, **updates) -> Professional:
        for key, value in updates.items():
            if hasattr(professional, key):
                setattr(professional, key, value)
        db.commit()
        db.refresh(professional)
        return professional

    @staticmethod
    def delete_professional(db: Session, professional: Professional) -> None:
        # Appointments keep their history without a professional
        for appointment in professional.appointments:
            appointment.professional_id = None
        db.delete(professional)
        db.commit()
