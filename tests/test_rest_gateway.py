"""Tests for the PostgREST gateway"""

import json

import httpx
import pytest

from foodpos.gateway import NO_ROWS, RestGateway, get_gateway, SQLGateway


def _gateway(handler) -> RestGateway:
    return RestGateway("https://backend.test/", "anon", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_select_query_syntax():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=[{"id": "o-1"}])

    gateway = _gateway(handler)
    result = await gateway.select(
        "orders",
        eq={"status": "pending", "shift_id": None, "paid": False},
        ilike={"customer_name": "ana"},
        order_by="created_at",
        descending=True,
        limit=5,
    )
    await gateway.close()

    assert result.ok
    assert result.data == [{"id": "o-1"}]

    request = requests[0]
    assert request.method == "GET"
    assert request.url.path == "/rest/v1/orders"
    params = request.url.params
    assert params["select"] == "*"
    assert params["status"] == "eq.pending"
    assert params["shift_id"] == "is.null"
    assert params["paid"] == "eq.false"
    assert params["customer_name"] == "ilike.ana"
    assert params["order"] == "created_at.desc"
    assert params["limit"] == "5"
    assert request.headers["apikey"] == "anon"


@pytest.mark.asyncio
async def test_insert_returns_single_row():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(201, json=[{"id": 1, "status": "active"}])

    gateway = _gateway(handler)
    result = await gateway.insert("shifts", {"id": 1, "status": "active"})
    await gateway.close()

    assert result.data == {"id": 1, "status": "active"}
    assert requests[0].method == "POST"
    assert requests[0].headers["Prefer"] == "return=representation"
    assert json.loads(requests[0].content) == {"id": 1, "status": "active"}


@pytest.mark.asyncio
async def test_insert_hidden_row_is_an_error():
    """The write went through but the new row is not visible to this session"""
    gateway = _gateway(lambda request: httpx.Response(201, json=[]))
    result = await gateway.insert("orders", {"status": "pending"})
    await gateway.close()

    assert not result.ok
    assert result.error.code == NO_ROWS


@pytest.mark.asyncio
async def test_ilike_wildcards_are_escaped():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=[])

    gateway = _gateway(handler)
    await gateway.select("products", ilike={"name": "50%_off"})
    await gateway.close()

    assert requests[0].url.params["name"] == "ilike.50\\%\\_off"


@pytest.mark.asyncio
async def test_conditional_update_filters():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=[])

    gateway = _gateway(handler)
    result = await gateway.update("shifts", {"status": "closed"}, eq={"id": 3, "status": "active"})
    await gateway.close()

    assert result.ok
    assert result.data == []
    assert requests[0].method == "PATCH"
    assert requests[0].url.params["id"] == "eq.3"
    assert requests[0].url.params["status"] == "eq.active"


@pytest.mark.asyncio
async def test_select_single_without_rows():
    gateway = _gateway(lambda request: httpx.Response(200, json=[]))
    result = await gateway.select_single("orders", eq={"id": "missing"})
    await gateway.close()

    assert not result.ok
    assert result.error.code == NO_ROWS


@pytest.mark.asyncio
async def test_http_error_becomes_gateway_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            409,
            json={"message": "duplicate key value", "code": "23505", "details": "Key (status)=(active)"},
        )

    gateway = _gateway(handler)
    result = await gateway.insert("shifts", {"id": 2, "status": "active"})
    await gateway.close()

    assert result.error.code == "23505"
    assert result.error.message == "duplicate key value"
    assert result.error.details == "Key (status)=(active)"


@pytest.mark.asyncio
async def test_transport_error_becomes_gateway_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    gateway = _gateway(handler)
    result = await gateway.delete("stock", eq={"id": "s-1"})
    await gateway.close()

    assert result.error.code == "network"


@pytest.mark.asyncio
async def test_access_token_switches_bearer():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["Authorization"])
        return httpx.Response(200, json=[])

    gateway = _gateway(handler)
    await gateway.select("orders")
    gateway.set_access_token("user-jwt")
    await gateway.select("orders")
    gateway.set_access_token(None)
    await gateway.select("orders")
    await gateway.close()

    assert seen == ["Bearer anon", "Bearer user-jwt", "Bearer anon"]


@pytest.mark.asyncio
async def test_sql_gateway_reports_unknown_table(gateway):
    result = await gateway.select("pedidos")

    assert result.error.code == "42P01"


@pytest.mark.asyncio
async def test_sql_gateway_reports_unknown_column(gateway):
    result = await gateway.select("orders", eq={"mesa": "1"})

    assert result.error.code == "42703"


def test_get_gateway():
    assert isinstance(get_gateway("sql", session_factory=None), SQLGateway)
    with pytest.raises(ValueError):
        get_gateway("firebase")
