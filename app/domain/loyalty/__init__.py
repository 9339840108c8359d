"""Loyalty domain - points, tiers and rewards"""

from .router import router

__all__ = ["router"]
