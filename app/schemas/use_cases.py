"""
app/schemas/use_cases.py

Response schemas for use-case generation endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from llm_synthesis.schema import UseCase


class UseCaseGenerationResponse(BaseModel):
    """
    API response model for one processed upload.
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    data: list[dict[str, str]] = Field(default_factory=list)
    summary: str
    patterns: dict[str, Any] = Field(default_factory=dict)
    use_cases: list[UseCase] = Field(default_factory=list, alias="useCases")


class StatusResponse(BaseModel):
    """
    API response model for the status probe.
    """

    status: str
    method: str
    url: str
    timestamp: str
    env: str
