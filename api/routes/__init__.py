"""
API route modules.
"""

from api.routes.cards import router as cards_router
from api.routes.health import router as health_router

__all__ = ["cards_router", "health_router"]
