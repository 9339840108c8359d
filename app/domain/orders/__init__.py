"""Order domain - order workflow, stock reservation and customer notifications"""

from .router import router

__all__ = ["router"]
