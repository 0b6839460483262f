from .crafting import router as crafting_router
from .items import router as items_router
from .system import router as system_router

__all__ = [
    "crafting_router",
    "items_router",
    "system_router",
]
