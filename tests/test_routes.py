"""Tests for endpoint registration on a FastAPI application."""

import pytest
from fastapi import APIRouter
from fastapi import FastAPI
from fastapi.testclient import TestClient

from fastapi_restkit import MiddlewareFactory
from fastapi_restkit import create_endpoint
from fastapi_restkit.backends.memory import MemoryCache
from fastapi_restkit.endpoint import ArgSpec
from fastapi_restkit.endpoint import RestEndpoint
from fastapi_restkit.request import EndpointRequest


@pytest.fixture
def app():
    """Create a test FastAPI application."""
    return FastAPI()


@pytest.fixture
def client(app):
    """Create a test client for the FastAPI application."""
    return TestClient(app)


def echo(request: EndpointRequest) -> dict:
    return request.get_params()


class TestRegistration:
    """Test suite for RestEndpoint.register."""

    def test_register_adds_namespaced_route(self, app, client):
        RestEndpoint("shop/v1", "/items", echo).register(app)

        response = client.get("/shop/v1/items?page=2")

        assert response.status_code == 200
        assert response.json() == {"page": "2"}

    def test_register_with_path_params(self, app, client):
        RestEndpoint("shop/v1", "/items/{item_id}", echo).register(app)

        response = client.get("/shop/v1/items/42")

        assert response.json() == {"item_id": "42"}

    def test_unlisted_method_is_rejected(self, app, client):
        RestEndpoint("shop/v1", "/items", echo, methods=["GET"]).register(app)

        response = client.post("/shop/v1/items")

        assert response.status_code == 405

    def test_post_json_body_reaches_handler(self, app, client):
        RestEndpoint("shop/v1", "/items", echo, methods=["POST"]).register(app)

        response = client.post("/shop/v1/items", json={"title": "Lamp", "price": 10})

        assert response.json() == {"title": "Lamp", "price": 10}


class TestPermissions:
    """Test suite for permission callbacks."""

    def test_permission_denied_returns_403(self, app, client):
        calls = {"handler": 0}

        def handler(request):
            calls["handler"] += 1
            return {}

        RestEndpoint(
            "shop/v1", "/private", handler, permission_callback=lambda request: False
        ).register(app)

        response = client.get("/shop/v1/private")

        assert response.status_code == 403
        assert calls["handler"] == 0

    def test_async_permission_callback(self, app, client):
        async def has_token(request: EndpointRequest) -> bool:
            return request.get_header("x-token") == "secret"

        RestEndpoint("shop/v1", "/private", echo, permission_callback=has_token).register(app)

        assert client.get("/shop/v1/private").status_code == 403
        assert client.get("/shop/v1/private", headers={"X-Token": "secret"}).status_code == 200


class TestArguments:
    """Test suite for the argument schema."""

    def test_defaults_are_applied(self, app, client):
        RestEndpoint(
            "shop/v1",
            "/items",
            echo,
            args={"page": {"default": 1}, "per_page": ArgSpec(default=10)},
        ).register(app)

        response = client.get("/shop/v1/items?page=3")

        assert response.json() == {"page": "3", "per_page": 10}

    def test_missing_required_argument_returns_400(self, app, client):
        RestEndpoint(
            "shop/v1", "/search", echo, args={"q": {"required": True}}
        ).register(app)

        response = client.get("/shop/v1/search")

        assert response.status_code == 400
        assert response.json() == {"detail": "Missing parameter(s): q"}
        assert client.get("/shop/v1/search?q=lamp").status_code == 200


class TestMiddlewares:
    """Test suite for middlewares on registered routes."""

    def test_cors_headers_on_registered_route(self, app, client):
        RestEndpoint(
            "shop/v1",
            "/items",
            echo,
            methods=["GET", "OPTIONS"],
            middlewares=[MiddlewareFactory.cors(["https://example.com"], ["GET"])],
        ).register(app)

        response = client.get("/shop/v1/items", headers={"Origin": "https://example.com"})
        preflight = client.options(
            "/shop/v1/items", headers={"Origin": "https://example.com"}
        )
        foreign = client.get("/shop/v1/items", headers={"Origin": "https://evil.com"})

        assert response.headers["access-control-allow-origin"] == "https://example.com"
        assert response.headers["access-control-allow-credentials"] == "true"
        assert preflight.headers["access-control-allow-methods"] == "GET"
        assert preflight.headers["access-control-max-age"] == "3600"
        assert "access-control-allow-origin" not in foreign.headers

    def test_sanitized_params_reach_handler(self, app, client):
        RestEndpoint(
            "shop/v1",
            "/posts",
            echo,
            methods=["POST"],
            middlewares=[MiddlewareFactory.sanitization()],
        ).register(app)

        response = client.post(
            "/shop/v1/posts",
            json={"title": "  <p>Hello</p> ", "meta": {"tag": "<b>x</b>"}, "id": 3},
        )

        assert response.json() == {"title": "Hello", "meta": {"tag": "x"}, "id": 3}


class TestCreateEndpoint:
    """Test suite for the create_endpoint facade."""

    def test_create_endpoint_registers_on_router(self, app, client):
        router = APIRouter()
        endpoint = create_endpoint(router, "shop/v1", "/items", echo)
        app.include_router(router)

        response = client.get("/shop/v1/items?x=1")

        assert isinstance(endpoint, RestEndpoint)
        assert response.json() == {"x": "1"}

    def test_create_endpoint_allows_everyone_by_default(self, app, client):
        endpoint = create_endpoint(app, "shop/v1", "/open", echo)

        assert endpoint.permission_callback(EndpointRequest()) is True
        assert client.get("/shop/v1/open").status_code == 200

    def test_create_endpoint_with_cache(self, app, client):
        calls = {"value": 0}

        def handler(request):
            calls["value"] += 1
            return {"count": calls["value"]}

        create_endpoint(app, "shop/v1", "/count", handler, cache=MemoryCache())

        first = client.get("/shop/v1/count?id=1")
        second = client.get("/shop/v1/count?id=1")

        assert first.json() == second.json() == {"count": 1}
        assert calls["value"] == 1
