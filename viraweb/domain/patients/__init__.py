"""Patients domain - clinic clients, their notes, photos and payment state"""

from .router import router

__all__ = ["router"]
