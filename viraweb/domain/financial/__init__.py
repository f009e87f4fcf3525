"""Financial domain - payments, per-session billing and financial reporting"""

from .router import router

__all__ = ["router"]
