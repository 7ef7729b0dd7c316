"""Equipment search API."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from app.config import settings
from app.core.rate_limit import search_limiter
from app.schemas.common import ErrorResponse
from app.schemas.search import SearchRequest
from app.services.catalog_service import get_catalog

from engine.search.search_engine import search

logger = logging.getLogger(__name__)

router = APIRouter()

API_VERSION = "1.0"


@router.post(
    "/search",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Search the equipment catalog",
    description=(
        "Full-text and faceted search with filters, sorting and pagination. "
        "Alternatives, compatible components, pricing and availability are "
        "attached to each hit only when requested."
    ),
)
async def search_equipment(body: SearchRequest, request: Request):
    search_limiter.check(request)

    try:
        query = body.to_query(settings.search_default_page_size, settings.search_max_page_size)
    except ValueError as exc:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "error": "Invalid search request",
                "details": [{"field": "options", "message": str(exc), "category": "search"}],
            },
        )

    try:
        result = search(get_catalog(), query)
    except Exception:
        logger.exception(
            "Search failed",
            extra={"request_type": "search", "category": ",".join(query.categories) or "all"},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": "Internal server error"},
        )

    return {
        "success": True,
        "data": result.to_dict(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": API_VERSION,
    }
