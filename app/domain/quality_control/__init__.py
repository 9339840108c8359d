"""Quality control domain - product inspections and defect tracking"""

from .router import router

__all__ = ["router"]
