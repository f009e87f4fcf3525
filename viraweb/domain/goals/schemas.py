"""Goal domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

GoalStatus = Literal["em_progresso", "concluida", "cancelada"]
GoalCategory = Literal["agendamentos", "clientes", "financeiro", "profissionais", "outros"]


class GoalCreate(BaseModel):
    title: str
    description: Optional[str] = None
    target_value: float
    current_value: float = 0
    unit: Optional[str] = None
    deadline: Optional[date] = None
    status: GoalStatus = "em_progresso"
    category: Optional[GoalCategory] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Título é obrigatório")
        return v.strip()

    @field_validator("target_value")
    @classmethod
    def validate_target(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("A meta deve ser maior que zero")
        return v


class GoalUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    target_value: Optional[float] = None
    current_value: Optional[float] = None
    unit: Optional[str] = None
    deadline: Optional[date] = None
    status: Optional[GoalStatus] = None
    category: Optional[GoalCategory] = None


class GoalResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    target_value: float
    current_value: float
    unit: Optional[str] = None
    deadline: Optional[date] = None
    status: str
    category: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
