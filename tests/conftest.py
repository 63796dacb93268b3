import json
import os
import tempfile

# Must be set before the eva package reads its configuration
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tempfile.gettempdir(), "eva_portal_test.db")
os.environ["CACHE_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["MARKETPLACE_API_URL"] = "http://marketplace.test"

import httpx
import pytest
from faker import Faker

from eva.auth import get_http_client
from eva.database import Base, SessionLocal, engine
from eva.main import app
from eva.services.marketplace_client import MarketplaceClient

fake = Faker()

MARKETPLACE_URL = "http://marketplace.test"

# Marketplace session records, keyed by bearer token
SESSIONS = {
    "client-token": {
        "id": "user-client",
        "email": "client@example.com",
        "name": "Ada Client",
        "role": "CLIENT",
    },
    "vendor-token": {
        "id": "user-vendor",
        "email": "vendor@example.com",
        "name": "Victor Vendor",
        "role": "PROFESSIONAL",
        "providerId": "prov-1",
    },
    "admin-token": {
        "id": "user-admin",
        "email": "admin@example.com",
        "name": "Grace Admin",
        "role": "ADMINISTRATOR",
    },
}

CLIENT_HEADERS = {"Authorization": "Bearer client-token"}
VENDOR_HEADERS = {"Authorization": "Bearer vendor-token"}
ADMIN_HEADERS = {"Authorization": "Bearer admin-token"}


def body_of(request: httpx.Request):
    """JSON body the portal sent upstream"""
    return json.loads(request.content) if request.content else None


class FakeMarketplace:
    """
    In-memory stand-in for the marketplace REST API

    Routes are keyed by (method, path); the query string is ignored. Unknown
    routes answer 404 like the real API. GET /api/auth/me resolves the
    bearer token or session cookie against SESSIONS.
    """

    def __init__(self):
        self.routes = {}
        self.requests: list[httpx.Request] = []

    def on(
        self, method: str, path: str, json=None, status_code: int = 200, content=None, handler=None, optional=()
    ):
        """
        Answer `method path` with a canned response or a handler.

        Fields named in `optional` behave like the marketplace's optional
        schema fields: they may be left out, but an explicit null is a 400.
        """
        if handler is None:

            def handler(request):
                if content is not None:
                    return httpx.Response(status_code, content=content)
                return httpx.Response(status_code, json=json)

        if optional:
            respond = handler

            def handler(request):
                body = body_of(request)
                nulls = sorted(k for k in optional if isinstance(body, dict) and k in body and body[k] is None)
                if nulls:
                    return httpx.Response(400, json={"message": f"Validation error: {nulls}"})
                return respond(request)

        self.routes[(method.upper(), path)] = handler

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    def last(self, method: str, path: str) -> httpx.Request:
        matching = self.calls(method, path)
        assert matching, f"no {method} {path} reached the marketplace"
        return matching[-1]

    def _session(self, request: httpx.Request) -> httpx.Response:
        token = request.headers.get("authorization", "").replace("Bearer ", "")
        for part in request.headers.get("cookie", "").split(";"):
            name, _, value = part.strip().partition("=")
            if name == "authjs.session-token":
                token = value
        user = SESSIONS.get(token)
        if user is None:
            return httpx.Response(401, json={"message": "Unauthorized"})
        return httpx.Response(200, json={"user": user})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key in self.routes:
            return self.routes[key](request)
        if key == ("GET", "/api/auth/me"):
            return self._session(request)
        return httpx.Response(404, json={"message": "Not found"})


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def marketplace():
    return FakeMarketplace()


@pytest.fixture
async def upstream_http(marketplace):
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(marketplace.handler), base_url=MARKETPLACE_URL
    ) as http:
        yield http


@pytest.fixture
def marketplace_client(upstream_http, anyio_backend):
    """MarketplaceClient acting as the admin, for service-level tests"""
    return MarketplaceClient(upstream_http, {"headers": ADMIN_HEADERS})


@pytest.fixture
async def client(upstream_http):
    """Portal API client; marketplace calls go to FakeMarketplace"""

    async def override_http_client():
        return upstream_http

    app.dependency_overrides[get_http_client] = override_http_client
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
