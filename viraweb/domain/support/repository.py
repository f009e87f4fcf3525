"""Support repository - Database operations for tickets and messages"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import SupportMessage, SupportTicket


class SupportRepository:

    @staticmethod
    def get_tickets(db: Session, user_id: int) -> list[SupportTicket]:
        return (
            db.query(SupportTicket)
            .filter(SupportTicket.user_id == user_id)
            .order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc())
            .all()
        )

    @staticmethod
    def get_ticket_by_id(db: Session, ticket_id: int, user_id: int) -> Optional[SupportTicket]:
        return (
            db.query(SupportTicket)
            .filter(SupportTicket.id == ticket_id, SupportTicket.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_messages(db: Session, ticket_id: int) -> list[SupportMessage]:
        return (
            db.query(SupportMessage)
            .filter(SupportMessage.ticket_id == ticket_id)
            .order_by(SupportMessage.created_at.asc(), SupportMessage.id.asc())
            .all()
        )

    @staticmethod
    def create_ticket(db: Session, user_id: int, **data) -> SupportTicket:
        ticket = SupportTicket(user_id=user_id, **data)
        db.add(ticket)
        db.commit()
        db.refresh(ticket)
        return ticket

    @staticmethod
    def add_message(db: Session, ticket: SupportTicket, user_id: int, message: str, is_staff: bool = False) -> SupportMessage:
        entry = SupportMessage(ticket_id=ticket.id, user_id=user_id, message=message, is_staff=is_staff)
        db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry

    @staticmethod
    def update_status(db: Session, ticket: SupportTicket, status: str) -> SupportTicket:
        ticket.status = status
        db.commit()
        db.refresh(ticket)
        return ticket
