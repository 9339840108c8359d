"""Shipping domain - shipping methods and rate quotes"""

from .router import router

__all__ = ["router"]
