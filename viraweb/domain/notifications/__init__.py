"""Notifications domain - in-app notifications for the tenant"""

from .router import router

__all__ = ["router"]
