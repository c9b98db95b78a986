import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

import mapbox_api

EMPTY_GEOCODE = {"type": "FeatureCollection", "query": [], "features": []}


class StubMapbox:
    """Local aiohttp app answering geocoding/directions paths with canned JSON."""
    def __init__(self, geocode=None, directions=None, status=200):
        self.geocode = geocode if geocode is not None else EMPTY_GEOCODE
        self.directions = directions if directions is not None else {"code": "NoRoute", "routes": []}
        self.status = status
        self.requests = []

    async def _handle(self, request: web.Request) -> web.StreamResponse:
        self.requests.append(request.rel_url)
        body = self.geocode if request.path.startswith("/geocoding/") else self.directions
        if callable(body):
            return await body(request)
        return web.json_response(body, status=self.status)

    async def __aenter__(self):
        app = web.Application()
        app.router.add_get("/{tail:.*}", self._handle)
        self.server = TestServer(app)
        await self.server.start_server()
        self.base_url = str(self.server.make_url("/")).rstrip("/")
        return self

    async def __aexit__(self, *exc):
        await self.server.close()


@pytest.fixture
def stub_mapbox():
    return StubMapbox


@pytest.fixture(autouse=True)
def access_token(monkeypatch):
    monkeypatch.setattr(mapbox_api, "_access_token", "pk.test-token")
    return "pk.test-token"
