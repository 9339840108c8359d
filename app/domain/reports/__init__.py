"""Reports domain - sales analytics"""

from .router import router

__all__ = ["router"]
