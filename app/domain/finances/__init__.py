"""Finances domain - invoices and financial dashboard"""

from .router import finances_router, router

__all__ = ["router", "finances_router"]
