import pytest
from fastapi.testclient import TestClient

from tests.helpers import initialize
from travel_planner.config import Settings
from travel_planner.mcp.registry import build_default_registry
from travel_planner.server import create_app


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings():
    return Settings(_env_file=None, heartbeat_interval=15.0, session_idle_timeout=None)


@pytest.fixture
def registry():
    return build_default_registry()


@pytest.fixture
def app(settings, registry):
    return create_app(settings=settings, registry=registry)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def session_id(client):
    return initialize(client)
