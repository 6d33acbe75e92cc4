import pytest
from fastapi.testclient import TestClient

from produce_api.api import create_app
from produce_api.config import MEMORY, Settings
from produce_api.db import open_storage
from produce_api.repository import ProduceRepository


@pytest.fixture(params=["sqlite3", "sqlalchemy"])
def handle(request):
    # Every repository test runs once per driver
    h = open_storage(MEMORY, request.param)
    try:
        yield h
    finally:
        h.close()


@pytest.fixture()
def repo(handle):
    return ProduceRepository(handle)


@pytest.fixture()
def settings():
    return Settings(db_path=MEMORY, enable_test_routes=True)


@pytest.fixture()
def client(handle, settings):
    app = create_app(settings, handle=handle)
    return TestClient(app)


@pytest.fixture()
def apple(client):
    res = client.post("/produce", json={"name": "Apple", "type": "fruit", "pricePerKg": 2.5})
    assert res.status_code == 201
    return res.json()
