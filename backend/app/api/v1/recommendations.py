"""Equipment recommendation API."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from app.config import settings
from app.core.rate_limit import recommendation_limiter
from app.schemas.common import DataResponse, ErrorResponse
from app.schemas.recommendation import RecommendationRequest
from app.services.catalog_service import get_catalog

from engine.advisor.pipeline import recommend
from engine.advisor.requirements import existing_system_from_snapshot, request_errors, snapshot_errors
from engine.errors import RecommendationValidationError

logger = logging.getLogger(__name__)

router = APIRouter()


def validation_error_response(exc: RecommendationValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "error": "Invalid request data",
            "details": [e.to_dict() for e in exc.errors],
        },
    )


def _validate(body: RecommendationRequest, requirements, constraints) -> None:
    """Check the request and the snapshot together, before any catalog access."""
    errors = request_errors(
        body.type, requirements, constraints, has_existing_system=bool(body.existing_system)
    )
    errors += snapshot_errors(body.existing_system)
    if errors:
        raise RecommendationValidationError(errors)


@router.post(
    "/recommendations",
    response_model=DataResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Generate equipment recommendations",
    description=(
        "Produce a system design, component alternatives, an upgrade path or "
        "cost optimization options for the given requirements."
    ),
)
async def create_recommendation(body: RecommendationRequest, request: Request):
    recommendation_limiter.check(request)

    request_type = body.type
    try:
        requirements = body.to_requirements()
        constraints = body.to_constraints()
        _validate(body, requirements, constraints)
        catalog = get_catalog()
        existing = existing_system_from_snapshot(body.existing_system, requirements.system_size, catalog)
        result = recommend(
            request_type,
            requirements,
            catalog,
            constraints=constraints,
            existing_system=existing,
            params=settings.recommendation_parameters(),
        )
    except RecommendationValidationError as exc:
        logger.info(
            "Rejected %s recommendation request: %s",
            request_type, exc,
            extra={"request_type": request_type, "category": exc.category, "error_count": len(exc.errors)},
        )
        return validation_error_response(exc)
    except Exception:
        logger.exception(
            "Recommendation failed",
            extra={"request_type": request_type, "category": "internal"},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": "Failed to generate recommendations"},
        )

    return {"success": True, "data": result.to_dict()}
