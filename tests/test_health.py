import pytest

from services.api.main import create_app
from tests.utils_http import client_for


@pytest.mark.asyncio()
async def test_health_endpoint(settings, recording_storage) -> None:
    app = create_app(settings=settings, storage=recording_storage)
    async with client_for(app) as client:
        response = await client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"


@pytest.mark.asyncio()
async def test_unknown_route_uses_message_body(settings, recording_storage) -> None:
    app = create_app(settings=settings, storage=recording_storage)
    async with client_for(app) as client:
        response = await client.get("/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"message": "Not Found"}
