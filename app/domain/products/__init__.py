"""Product domain - catalogue and variant combinations"""

from .router import router, variants_router

__all__ = ["router", "variants_router"]
