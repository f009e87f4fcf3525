"""Professionals domain - clinic staff that attend appointments"""

from .router import router

__all__ = ["router"]
