"""Dashboard schemas"""

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel


class DashboardStats(BaseModel):
    appointments_today: int
    active_patients: int
    completion_rate: int
    growth_rate: int


class UpcomingAppointment(BaseModel):
    id: int
    patient: str
    professional: str
    time: str
    date: date
    status: str


class RecentPatient(BaseModel):
    id: int
    name: str
    last_visit: str
    status: str


class Birthday(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    birthday: date
    type: Literal["client", "professional"]
