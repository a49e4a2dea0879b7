"""Test configuration and fixtures"""

from datetime import datetime
from typing import Any, Dict, Optional, Set

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from foodpos.auth import LocalAuthBackend
from foodpos.config import Settings
from foodpos.database import Base
from foodpos.gateway import GatewayError, GatewayResult, SQLGateway
from foodpos.main import app
from foodpos.terminal import PosTerminal


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

OPERATOR_EMAIL = "ana@example.com"
OPERATOR_PASSWORD = "testpass123"


class FlakyGateway(SQLGateway):
    """SQL gateway that fails chosen (operation, table) calls"""

    def __init__(self, session_factory):
        super().__init__(session_factory)
        self.failing: Set[tuple] = set()
        self.calls: list = []

    def fail(self, operation: str, table: str) -> None:
        self.failing.add((operation, table))

    def heal(self) -> None:
        self.failing.clear()

    def _broken(self, operation: str, table: str) -> Optional[GatewayResult]:
        self.calls.append((operation, table))
        if (operation, table) in self.failing:
            return GatewayResult(error=GatewayError(message=f"{operation} on {table} failed", code="500"))
        return None

    async def select(self, table: str, **kwargs) -> GatewayResult:
        return self._broken("select", table) or await super().select(table, **kwargs)

    async def insert(self, table: str, values: Dict[str, Any]) -> GatewayResult:
        return self._broken("insert", table) or await super().insert(table, values)

    async def update(self, table: str, values: Dict[str, Any], **kwargs) -> GatewayResult:
        return self._broken("update", table) or await super().update(table, values, **kwargs)

    async def delete(self, table: str, **kwargs) -> GatewayResult:
        return self._broken("delete", table) or await super().delete(table, **kwargs)


@pytest.fixture
def test_settings():
    """Settings for tests"""
    return Settings(
        gateway_backend="sql",
        database_url=TEST_DATABASE_URL,
        jwt_secret_key="test-secret",
        _env_file=None,
    )


@pytest.fixture
async def session_factory():
    """Create test database"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def gateway(session_factory):
    return FlakyGateway(session_factory)


@pytest.fixture
def terminal(gateway, test_settings):
    """Terminal over the test database, signed out"""
    return PosTerminal(gateway, LocalAuthBackend(gateway), test_settings)


@pytest.fixture
async def operator(terminal):
    """Register the test operator (leaves the terminal signed in)"""
    session = await terminal.session.sign_up(OPERATOR_EMAIL, OPERATOR_PASSWORD, "Ana Souza")
    assert session is not None
    return session


@pytest.fixture
async def signed_in(terminal, operator):
    """Terminal with the test operator signed in"""
    return terminal


@pytest.fixture
async def catalog(signed_in, gateway):
    """Categories, products and stock rows"""
    lanches = (await gateway.insert("categories", {"name": "Lanches", "active": True})).data
    bebidas = (await gateway.insert("categories", {"name": "Bebidas", "active": True})).data
    await gateway.insert("categories", {"name": "Antigos", "active": False})

    products = {}
    for name, price, category in [
        ("X-Burguer", 20.0, lanches),
        ("Batata Frita", 15.0, lanches),
        ("Refrigerante", 5.0, bebidas),
    ]:
        product = (
            await gateway.insert(
                "products",
                {"name": name, "price": price, "category_id": category["id"], "available": True},
            )
        ).data
        await gateway.insert(
            "stock",
            {
                "product_id": product["id"],
                "quantity": 10,
                "unit": "un",
                "min_stock": 2,
                "purchase_price": price / 2,
                "category": "Ingredientes",
                "last_update": datetime.utcnow().isoformat(),
            },
        )
        products[name] = product

    await signed_in.catalog.refresh()
    await signed_in.inventory.refresh()
    return products


@pytest.fixture
async def active_shift(signed_in):
    """Open shift for the test operator"""
    shift = await signed_in.shifts.open_shift("Ana", 100.0)
    assert shift is not None
    return shift


@pytest.fixture
async def client(terminal):
    """Create test client bound to the test terminal"""
    app.state.terminal = terminal

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.state.terminal = None


@pytest.fixture
async def authenticated_client(client, operator):
    """Create authenticated test client"""
    client.headers["Authorization"] = f"Bearer {operator.access_token}"
    return client
