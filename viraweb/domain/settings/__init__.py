"""Settings domain - account profile, clinic info and credentials"""

from .router import router

__all__ = ["router"]
