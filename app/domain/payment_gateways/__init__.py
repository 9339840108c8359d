"""Payment gateway domain - provider configuration and credential checks"""

from .router import router

__all__ = ["router"]
