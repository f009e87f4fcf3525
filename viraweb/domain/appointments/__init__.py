"""Appointments domain - scheduling, completion and per-professional counts"""

from .router import router

__all__ = ["router"]
