"""User management domain - dashboard operators"""

from .router import router

__all__ = ["router"]
