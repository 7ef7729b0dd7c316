import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.core.logging import RequestLoggingMiddleware, setup_logging
from app.api.v1 import compatibility, equipment, recommendations, search
from app.services.catalog_service import get_catalog

logger = logging.getLogger(__name__)

# Top-level request key -> error category
_ERROR_CATEGORIES = {
    "requirements": "requirements",
    "constraints": "constraints",
    "existingSystem": "existing_system",
    "existing_system": "existing_system",
    "filters": "search",
    "options": "search",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    setup_logging(json_format=settings.log_json, debug=settings.debug)
    catalog = get_catalog()
    logger.info("%s started with %d catalog items", settings.app_name, len(catalog))
    yield


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    details = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        category = _ERROR_CATEGORIES.get(loc[0], "request") if loc else "request"
        if len(loc) > 1 and loc[0] == "requirements" and loc[1] in ("location", "installation", "preferences"):
            category = loc[1]
        details.append({"field": ".".join(loc) or "body", "message": err.get("msg", ""), "category": category})
    return details


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": "Invalid request data", "details": _field_errors(exc)},
    )


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(RequestLoggingMiddleware)
    application.add_exception_handler(RequestValidationError, request_validation_handler)

    application.include_router(search.router, prefix="/api/v1/equipment", tags=["search"])
    application.include_router(
        recommendations.router, prefix="/api/v1/equipment", tags=["recommendations"]
    )
    application.include_router(
        compatibility.router, prefix="/api/v1/equipment", tags=["compatibility"]
    )
    application.include_router(equipment.router, prefix="/api/v1/equipment", tags=["equipment"])

    @application.get("/health")
    async def health_check() -> dict:
        result: dict = {"status": "ok", "services": {}}
        try:
            catalog = get_catalog()
            result["services"]["catalog"] = "ok"
            result["catalog"] = {"total": len(catalog), "categories": catalog.counts()}
        except Exception as e:
            result["services"]["catalog"] = f"error: {e}"
            result["status"] = "degraded"
        return result

    return application


app = create_app()
