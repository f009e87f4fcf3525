"""Goals domain - tenant goals and automatic progress tracking"""

from .router import router

__all__ = ["router"]
