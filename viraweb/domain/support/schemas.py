"""Support schemas"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

TicketStatus = Literal["open", "in_progress", "resolved", "closed"]
TicketPriority = Literal["low", "medium", "high", "urgent"]


class TicketCreate(BaseModel):
    subject: str
    message: str
    priority: TicketPriority = "medium"

    @field_validator("subject", "message")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Campo obrigatório")
        return v.strip()


class TicketReply(BaseModel):
    message: str

    @field_validator("message")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Mensagem é obrigatória")
        return v.strip()


class TicketStatusUpdate(BaseModel):
    status: TicketStatus


class TicketResponse(BaseModel):
    id: int
    subject: str
    message: str
    status: str
    priority: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TicketMessageResponse(BaseModel):
    id: int
    ticket_id: int
    message: str
    is_staff: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
