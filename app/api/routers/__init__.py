"""
app/api/routers package marker.
"""

from app.api.routers.status_router import router as status_router
from app.api.routers.use_cases import router as use_cases_router

__all__ = [
    "status_router",
    "use_cases_router",
]
