# API routers
from .resources import router as resources_router

__all__ = ["resources_router"]
