"""Integration tests for FastAPI integration across layers."""

import pytest

pytest.importorskip("fastapi")

from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from parcel_di import CachedDelivery, InstanceCache, RegularDelivery, build_container, delivery_location
from parcel_di.infrastructure.fastapi_integration.integration import (
    ContainerMiddleware,
    create_fastapi_dependency,
    create_request_dependency,
)


class Counter:
    def __init__(self):
        self.value = 0

    def increment(self):
        self.value += 1
        return self.value


@delivery_location
class RequestContext:
    def __init__(self, container, label="anonymous"):
        self.counter = container.Counter()
        self.label = label


@pytest.fixture
def container():
    return build_container(
        {
            "Counter": lambda c: CachedDelivery(Counter, cache=InstanceCache()),
            "RequestContext": lambda c: RegularDelivery(RequestContext),
        }
    )


class TestFastAPIIntegrationEndToEnd:
    """Test complete FastAPI integration scenarios."""

    def test_cached_member_shared_across_requests(self, container):
        """Test that a cached member keeps state between requests."""
        app = FastAPI()
        get_counter = create_fastapi_dependency(container, "Counter")

        @app.post("/hits")
        def hit(counter: Counter = Depends(get_counter)):
            return {"hits": counter.increment()}

        client = TestClient(app)

        assert client.post("/hits").json() == {"hits": 1}
        assert client.post("/hits").json() == {"hits": 2}

    def test_regular_member_per_request(self, container):
        """Test that regular members are built for each request through the middleware."""
        app = FastAPI()
        app.add_middleware(ContainerMiddleware, container=container)
        get_context = create_request_dependency("RequestContext", label="api")
        seen = []

        @app.get("/context")
        def read_context(context: RequestContext = Depends(get_context)):
            seen.append(context)
            return {"label": context.label, "hits": context.counter.increment()}

        client = TestClient(app)

        assert client.get("/context").json() == {"label": "api", "hits": 1}
        assert client.get("/context").json() == {"label": "api", "hits": 2}
        assert seen[0] is not seen[1]
        assert seen[0].counter is seen[1].counter

    def test_request_state_exposes_container(self, container):
        """Test that endpoints can use the container from request state directly."""
        app = FastAPI()
        app.add_middleware(ContainerMiddleware, container=container)

        @app.get("/members")
        def members(request: Request):
            return {"members": list(request.state.container)}

        response = TestClient(app).get("/members")

        assert response.json() == {"members": ["Counter", "RequestContext"]}

    def test_missing_middleware_returns_server_error(self, container):
        """Test the failure mode when the middleware is not installed."""
        app = FastAPI()
        get_context = create_request_dependency("RequestContext")

        @app.get("/context")
        def read_context(context: RequestContext = Depends(get_context)):
            return {"label": context.label}

        client = TestClient(app, raise_server_exceptions=False)

        assert client.get("/context").status_code == 500
