"""API test infrastructure: async httpx client over the test catalog."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.rate_limit import recommendation_limiter, search_limiter
from app.services.catalog_service import set_catalog


# ---------------------------------------------------------------------------
# FastAPI app with the test catalog installed
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def app(catalog):
    from app.main import create_app

    application = create_app()
    set_catalog(catalog)

    # Reset rate limiters between tests
    search_limiter.reset()
    recommendation_limiter.reset()

    yield application

    set_catalog(None)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def recommendation_body():
    """Factory for camelCase request bodies as the web form sends them."""

    def _make(request_type: str = "system_design", **requirements) -> dict:
        body = {
            "type": request_type,
            "requirements": {
                "systemSize": 9.2,
                "priorities": ["efficiency"],
                "location": {"latitude": 37.7, "longitude": -122.4},
                "installation": {"roofType": "asphalt_shingle", "roofArea": 120, "roofPitch": 25},
            },
        }
        body["requirements"].update(requirements)
        return body

    return _make
