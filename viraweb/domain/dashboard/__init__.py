"""Dashboard domain - home screen aggregates"""

from .router import router

__all__ = ["router"]
