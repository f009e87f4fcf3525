"""Report repository - Database operations for saved reports"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Report


class ReportRepository:

    @staticmethod
    def get_reports(db: Session, user_id: int) -> list[Report]:
        return (
            db.query(Report)
            .filter(Report.user_id == user_id)
            .order_by(Report.created_at.desc(), Report.id.desc())
            .all()
        )

    @staticmethod
    def get_report_by_id(db: Session, report_id: int, user_id: int) -> Optional[Report]:
        return db.query(Report).filter(Report.id == report_id, Report.user_id == user_id).first()

    @staticmethod
    def create_report(db: Session, user_id: int, **data) -> Report:
        report = Report(user_id=user_id, **data)
        db.add(report)
        db.commit()
        db.refresh(report)
        return report

    @staticmethod
    def update_report(db: Session, report: Report, **updates) -> Report:
        for key, value in updates.items():
            if hasattr(report, key):
                setattr(report, key, value)
        db.commit()
        db.refresh(report)
        return report

    @staticmethod
    def delete_report(db: Session, report: Report) -> None:
        db.delete(report)
        db.commit()
