"""Reports domain - saved reports and chart aggregates"""

from .router import router

__all__ = ["router"]
