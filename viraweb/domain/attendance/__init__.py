"""Attendance domain - one presence record per patient per day"""

from .router import router

__all__ = ["router"]
