from vdesk.api.item import router as item_router
from vdesk.api.health import router as health_router

__all__ = ["item_router", "health_router"]
