"""Support domain - tickets and their message threads"""

from .router import router

__all__ = ["router"]
