"""Email domain - SMTP configuration and template management"""

from .router import router

__all__ = ["router"]
