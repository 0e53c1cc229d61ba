"""
app/services package marker.
"""

from app.services.use_case_service import (
    EmptyCSVError,
    UseCaseGenerationError,
    UseCaseGenerationResult,
    UseCaseService,
    get_use_case_service,
)

__all__ = [
    "EmptyCSVError",
    "UseCaseGenerationError",
    "UseCaseGenerationResult",
    "UseCaseService",
    "get_use_case_service",
]
