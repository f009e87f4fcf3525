"""Support router - tickets, replies and the support inbox notifications"""

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...email_service import notify_support_new_ticket, notify_support_reply, send_quietly
from ...models import User
from .schemas import (
    TicketCreate,
    TicketMessageResponse,
    TicketReply,
    TicketResponse,
    TicketStatusUpdate,
)
from .service import SupportService

router = APIRouter(prefix="/api/support", tags=["Support"])


def get_support_service(db: Session = Depends(get_db)) -> SupportService:
    return SupportService(db)


@router.get("/tickets", response_model=list[TicketResponse])
async def get_tickets(
    current_user: User = Depends(get_current_user),
    service: SupportService = Depends(get_support_service),
):
    return service.get_tickets(current_user)


@router.post("/tickets", response_model=TicketResponse, status_code=201)
async def create_ticket(
    data: TicketCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    service: SupportService = Depends(get_support_service),
):
    ticket = service.create_ticket(data, current_user)
    background_tasks.add_task(
        send_quietly,
        notify_support_new_ticket,
        ticket_id=ticket.id,
        subject=ticket.subject,
        message=ticket.message,
        user_email=current_user.email,
        priority=ticket.priority,
    )
    return ticket


@router.get("/tickets/{ticket_id}/messages", response_model=list[TicketMessageResponse])
async def get_ticket_messages(
    ticket_id: int,
    current_user: User = Depends(get_current_user),
    service: SupportService = Depends(get_support_service),
):
    return service.get_messages(ticket_id, current_user)


@router.post("/tickets/{ticket_id}/messages", response_model=TicketMessageResponse, status_code=201)
async def reply_to_ticket(
    ticket_id: int,
    data: TicketReply,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    service: SupportService = Depends(get_support_service),
):
    ticket, entry = service.reply(ticket_id, data.message, current_user)
    background_tasks.add_task(
        send_quietly,
        notify_support_reply,
        ticket_id=ticket.id,
        subject=ticket.subject,
        message=entry.message,
        user_email=current_user.email,
    )
    return entry


@router.put("/tickets/{ticket_id}/status", response_model=TicketResponse)
async def update_ticket_status(
    ticket_id: int,
    data: TicketStatusUpdate,
    current_user: User = Depends(get_current_user),
    service: SupportService = Depends(get_support_service),
):
    return service.update_status(ticket_id, data.status, current_user)
