import pytest
from fastapi.testclient import TestClient

from config import Settings
from coordinator import AlarmCoordinator
from main import create_app


@pytest.fixture
def coordinator():
    return AlarmCoordinator()


@pytest.fixture
def app():
    return create_app(Settings(service_name="alarm-control-test", log_default_limit=5, log_max_limit=10))


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
