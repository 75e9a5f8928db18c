"""HTTP routers for the journal API."""

from .config import router as config_router
from .interactions import router as interactions_router
from .users import router as users_router

__all__ = ["config_router", "interactions_router", "users_router"]
