from __future__ import annotations

from typing import Callable

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from app.core.config import settings
from app.core.logging import get_logger
from app.modules.study_cards.errors import (
    ConfigurationError,
    InputError,
    RateLimitError,
    StudyCardError,
    UpstreamTimeoutError,
)
from app.modules.study_cards.pipeline import StudyCardPipeline
from .schemas import ErrorResponse, StudyCardsResponse

logger = get_logger(__name__)

router = APIRouter()

PDF_CONTENT_TYPES = {"application/pdf", "application/x-pdf"}


def build_pipeline() -> StudyCardPipeline:
    return StudyCardPipeline.from_settings(settings)


def get_pipeline_factory() -> Callable[[], StudyCardPipeline]:
    """Pipelines are built after the upload guards so bad uploads never need a key."""
    return build_pipeline


def _status_for(exc: StudyCardError) -> int:
    if isinstance(exc, ConfigurationError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    if isinstance(exc, InputError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(exc, RateLimitError):
        return status.HTTP_429_TOO_MANY_REQUESTS
    if isinstance(exc, UpstreamTimeoutError):
        return status.HTTP_504_GATEWAY_TIMEOUT
    return status.HTTP_502_BAD_GATEWAY


def _looks_like_pdf(upload: UploadFile) -> bool:
    if upload.content_type in PDF_CONTENT_TYPES:
        return True
    return (upload.filename or "").lower().endswith(".pdf")


@router.post(
    f"/{settings.app.version}/study-cards",
    response_model=StudyCardsResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        415: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
    tags=["study-cards"],
)
async def create_study_cards(
    file: UploadFile = File(...),
    make_pipeline: Callable[[], StudyCardPipeline] = Depends(get_pipeline_factory),
) -> StudyCardsResponse:
    if not _looks_like_pdf(file):
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Only PDF files can be uploaded.",
        )

    limit = settings.generation.max_upload_bytes
    payload = await file.read(limit + 1)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="The uploaded file is empty."
        )
    if len(payload) > limit:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size must be {limit // (1024 * 1024)}MB or less.",
        )

    try:
        result = await make_pipeline().run(payload)
    except StudyCardError as exc:
        logger.warning("Study card generation failed for %s: %s", file.filename, exc.message)
        raise HTTPException(status_code=_status_for(exc), detail=exc.message) from exc

    return StudyCardsResponse(model=result.model, cards=result.cards)
