"""Customer domain - CRM segmentation and customer management"""

from .router import router

__all__ = ["router"]
