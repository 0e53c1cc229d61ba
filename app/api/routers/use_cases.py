"""
app/api/routers/use_cases.py

Use-case generation HTTP endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, HTTPException, UploadFile, status

from analysis.ingestor import ParseError
from app.api.dependencies import get_csv_upload
from app.schemas.use_cases import UseCaseGenerationResponse
from app.services.use_case_service import (
    EmptyCSVError,
    UseCaseGenerationError,
    UseCaseService,
    get_use_case_service,
)
from llm_synthesis.adapter import LLMConfigurationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["use-cases"])


@router.post("/upload", response_model=UseCaseGenerationResponse)
def upload_csv(
    file: UploadFile = Depends(get_csv_upload),
    business_problem: str = Form(default="", alias="businessProblem"),
    business_scenario: str = Form(default="", alias="businessScenario"),
    service: UseCaseService = Depends(get_use_case_service),
) -> UseCaseGenerationResponse:
    """
    Analyze one CSV upload and generate business use cases from it.
    """

    logger.info("Upload request received filename=%s", file.filename)
    try:
        result = service.generate(
            buffer=file.file.read(),
            business_problem=business_problem,
            business_scenario=business_scenario,
        )
    except (ParseError, EmptyCSVError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except LLMConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"API key error: {exc}",
        ) from exc
    except UseCaseGenerationError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Use case generation failed: {exc}",
        ) from exc
    finally:
        file.file.close()

    return UseCaseGenerationResponse(
        data=result.rows,
        summary=result.summary,
        patterns=result.patterns.to_dict(),
        use_cases=result.use_cases,
    )
