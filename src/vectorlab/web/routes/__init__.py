"""Route handlers for the Web API."""

from vectorlab.web.routes.health import router as health_router
from vectorlab.web.routes.structure import router as structure_router
from vectorlab.web.routes.practice import router as practice_router
from vectorlab.web.routes.exercises import router as exercises_router

__all__ = [
    "health_router",
    "structure_router",
    "practice_router",
    "exercises_router",
]
