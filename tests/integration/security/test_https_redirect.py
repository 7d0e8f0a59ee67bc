"""Tests for HTTPS enforcement behind a TLS-terminating proxy."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from localpassengers.core.auth.middleware import HttpsRedirectMiddleware
from localpassengers.core.constants import HSTS_HEADER_VALUE


pytestmark = pytest.mark.integration


@pytest.fixture
async def client():
    app = FastAPI()
    app.add_middleware(HttpsRedirectMiddleware)

    @app.get("/api/trains")
    async def trains():
        return {"ok": True}

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


async def test_plain_http_is_redirected(client: AsyncClient):
    response = await client.get(
        "/api/trains?page=2", headers={"x-forwarded-proto": "http"}
    )

    assert response.status_code == 308
    assert response.headers["location"] == "https://test/api/trains?page=2"


async def test_https_gets_hsts(client: AsyncClient):
    response = await client.get("/api/trains", headers={"x-forwarded-proto": "https"})

    assert response.status_code == 200
    assert response.headers["strict-transport-security"] == HSTS_HEADER_VALUE


async def test_without_proxy_header_is_served(client: AsyncClient):
    response = await client.get("/api/trains")

    assert response.status_code == 200
