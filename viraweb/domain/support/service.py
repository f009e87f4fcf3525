"""Support service"""

import logging

from sqlalchemy.orm import Session

from ...error_messages import not_found
from ...models import SupportMessage, SupportTicket, User
from ...realtime import INSERT, UPDATE, publish_change
from .repository import SupportRepository
from .schemas import TicketCreate

logger = logging.getLogger(__name__)


class SupportService:

    def __init__(self, db: Session):
        self.db = db
        self.repo = SupportRepository()

    def get_tickets(self, user: User) -> list[SupportTicket]:
        return self.repo.get_tickets(self.db, user.id)

    def get_ticket(self, ticket_id: int, user: User) -> SupportTicket:
        ticket = self.repo.get_ticket_by_id(self.db, ticket_id, user.id)
        if not ticket:
            raise not_found("ticket")
        return ticket

    def create_ticket(self, data: TicketCreate, user: User) -> SupportTicket:
        ticket = self.repo.create_ticket(
            self.db,
            user.id,
            subject=data.subject,
            message=data.message,
            priority=data.priority,
            status="open",
        )
        logger.info(f"🎫 Support ticket {ticket.id} opened by user {user.id} ({ticket.priority})")
        publish_change("support_tickets", user.id, INSERT, ticket)
        return ticket

    def get_messages(self, ticket_id: int, user: User) -> list[SupportMessage]:
        ticket = self.get_ticket(ticket_id, user)
        return self.repo.get_messages(self.db, ticket.id)

    def reply(self, ticket_id: int, message: str, user: User) -> tuple[SupportTicket, SupportMessage]:
        ticket = self.get_ticket(ticket_id, user)
        entry = self.repo.add_message(self.db, ticket, user.id, message)
        publish_change("support_messages", user.id, INSERT, entry)
        return ticket, entry

    def update_status(self, ticket_id: int, status: str, user: User) -> SupportTicket:
        ticket = self.repo.update_status(self.db, self.get_ticket(ticket_id, user), status)
        publish_change("support_tickets", user.id, UPDATE, ticket)
        return ticket
