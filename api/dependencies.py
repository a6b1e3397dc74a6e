"""
FastAPI dependencies for dependency injection.

Provides the singleton gateway to route handlers.
"""

from typing import Optional

from manager.gateway import CardsGateway


# Global singleton (set during app lifespan)
_gateway: Optional[CardsGateway] = None


def set_gateway(gateway: Optional[CardsGateway]) -> None:
    """Set the global gateway instance."""
    global _gateway
    _gateway = gateway


async def get_gateway() -> CardsGateway:
    """
    Dependency that provides the mutation gateway.

    Usage:
        @router.get("/cards")
        async def get_cards(
            gateway: CardsGateway = Depends(get_gateway)
        ):
            ...
    """
    if _gateway is None:
        raise RuntimeError("Gateway not initialized")
    return _gateway
