"""
app/schemas package marker.
"""

from app.schemas.use_cases import StatusResponse, UseCaseGenerationResponse

__all__ = [
    "StatusResponse",
    "UseCaseGenerationResponse",
]
