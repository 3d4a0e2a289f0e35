from catalog.routers.species import router as species_router
from catalog.routers.comments import router as comments_router
from catalog.routers.auth import router as auth_router

__all__ = ["species_router", "comments_router", "auth_router"]
