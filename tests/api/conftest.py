"""API test fixtures — in-memory store behind the FastAPI app.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_store / get_broadcaster dependencies overridden; the lifespan is not run
    - db_manager patched so the readiness probe sees the test database
"""

import pytest
from httpx import ASGITransport, AsyncClient

import stockhub.infrastructure.database as db_module
from stockhub.infrastructure.broadcast import EventBroadcaster, get_broadcaster
from stockhub.infrastructure.database import DatabaseSessionManager, get_store
from stockhub.main import app


@pytest.fixture
def test_store():
    manager = DatabaseSessionManager("sqlite://")
    manager.create_schema()
    yield manager
    manager.dispose()


@pytest.fixture
def broadcaster():
    return EventBroadcaster(queue_size=10)


@pytest.fixture
async def client(test_store, broadcaster, monkeypatch):
    """FastAPI test client with store and broadcaster overridden."""
    app.dependency_overrides[get_store] = lambda: test_store
    app.dependency_overrides[get_broadcaster] = lambda: broadcaster
    monkeypatch.setattr(db_module, "db_manager", test_store)

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def create_stock(client):
    async def _create(name: str, price: str = "10") -> dict:
        res = await client.post(
            "/api/v1/stocks", json={"name": name, "currentPrice": price},
        )
        assert res.status_code == 201, res.text
        return res.json()
    return _create


@pytest.fixture
def create_exchange(client):
    async def _create(name: str, members: int = 0) -> dict:
        res = await client.post("/api/v1/exchanges", json={"name": name})
        assert res.status_code == 201, res.text
        exchange = res.json()
        for i in range(members):
            stock = await client.post(
                "/api/v1/stocks", json={"name": f"{name}-{i}", "currentPrice": "1"},
            )
            res = await client.post(
                f"/api/v1/exchanges/{exchange['id']}/stocks",
                json={"stockId": stock.json()["id"]},
            )
            assert res.status_code == 200, res.text
            exchange = res.json()
        return exchange
    return _create
