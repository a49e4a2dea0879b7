"""Tests for the order lifecycle"""

import pytest

from foodpos.notifications import NotificationCode
from foodpos.schemas.order import OrderCreate, OrderItemCreate, OrderStatus, OrderType, PaymentMethod
from foodpos.schemas.shift import ShiftClose, ShiftStatus


def _takeout(*items, **kwargs) -> OrderCreate:
    return OrderCreate(type=OrderType.TAKEOUT, identifier="Ana", items=list(items), **kwargs)


async def _stored_order(gateway, order_id):
    return (await gateway.select_single("orders", eq={"id": order_id})).data


async def _stored_lines(gateway, order_id):
    return (await gateway.select("order_items", eq={"order_id": order_id}, order_by="created_at")).data


@pytest.mark.asyncio
async def test_create_order_resolves_catalog_prices(signed_in, gateway, catalog):
    """Price comes from the referenced product or a name match"""
    order_id = await signed_in.orders.create_order(
        _takeout(
            OrderItemCreate(product_id=catalog["X-Burguer"]["id"], quantity=2),
            OrderItemCreate(name="refrigerante", quantity=3),
        )
    )

    stored = await _stored_order(gateway, order_id)
    assert stored["status"] == "pending"
    assert stored["total_amount"] == pytest.approx(55.0)

    lines = await _stored_lines(gateway, order_id)
    assert [(line["product_id"], line["unit_price"]) for line in lines] == [
        (catalog["X-Burguer"]["id"], 20.0),
        (catalog["Refrigerante"]["id"], 5.0),
    ]


@pytest.mark.asyncio
async def test_unknown_item_is_free(signed_in, gateway, catalog):
    order_id = await signed_in.orders.create_order(_takeout(OrderItemCreate(name="Pastel de vento", quantity=1)))

    lines = await _stored_lines(gateway, order_id)
    assert lines[0]["product_id"] is None
    assert lines[0]["unit_price"] == 0
    assert (await _stored_order(gateway, order_id))["total_amount"] == 0


@pytest.mark.asyncio
async def test_unknown_reference_is_kept(signed_in, gateway, catalog):
    """A reference that matches no product is stored as given, never swapped for a name match"""
    missing = "00000000-0000-4000-8000-0000000000aa"
    order_id = await signed_in.orders.create_order(
        _takeout(OrderItemCreate(product_id=missing, name="Refrigerante", quantity=1))
    )

    lines = await _stored_lines(gateway, order_id)
    assert lines[0]["product_id"] == missing
    assert lines[0]["unit_price"] == 0
    assert lines[0]["name"] == "Refrigerante"


@pytest.mark.asyncio
async def test_name_lookup_treats_wildcards_literally(signed_in, gateway, catalog):
    order_id = await signed_in.orders.create_order(
        _takeout(OrderItemCreate(name="%", quantity=1), OrderItemCreate(name="X_Burguer", quantity=1))
    )

    lines = await _stored_lines(gateway, order_id)
    assert [line["product_id"] for line in lines] == [None, None]
    assert (await _stored_order(gateway, order_id))["total_amount"] == 0


@pytest.mark.asyncio
async def test_price_lookup_failure_is_reported(signed_in, gateway, catalog):
    """A failed catalog read is not the same as an unknown item"""
    mark = signed_in.notifier.count
    gateway.fail("select", "products")

    order_id = await signed_in.orders.create_order(_takeout(OrderItemCreate(name="X-Burguer", quantity=1)))

    assert order_id is not None
    assert signed_in.notifier.last_error(since=mark).code == NotificationCode.READ_FAILED


@pytest.mark.asyncio
async def test_total_write_failure_is_reported(signed_in, gateway, catalog):
    mark = signed_in.notifier.count
    gateway.fail("update", "orders")

    order_id = await signed_in.orders.create_order(_takeout(OrderItemCreate(name="X-Burguer", quantity=1)))

    assert order_id is not None
    assert signed_in.notifier.last_error(since=mark).code == NotificationCode.WRITE_FAILED


@pytest.mark.asyncio
async def test_service_fee_applies_at_creation_only(signed_in, gateway, catalog):
    """The fee is not re-applied to items added later"""
    order_id = await signed_in.orders.create_order(
        _takeout(OrderItemCreate(name="X-Burguer", quantity=1, price=100.0), has_service_fee=True)
    )
    assert (await _stored_order(gateway, order_id))["total_amount"] == pytest.approx(110.0)

    assert await signed_in.orders.add_items_to_order(
        order_id, [OrderItemCreate(name="Refrigerante", quantity=2)]
    )
    assert (await _stored_order(gateway, order_id))["total_amount"] == pytest.approx(120.0)


@pytest.mark.asyncio
async def test_create_order_table_identifier(signed_in, gateway):
    order_id = await signed_in.orders.create_order(OrderCreate(type=OrderType.TABLE, identifier="7", items=[]))

    order = signed_in.orders.get_order(order_id)
    assert order.type == OrderType.TABLE
    assert order.identifier == "7"
    assert (await _stored_order(gateway, order_id))["table_number"] == "7"


@pytest.mark.asyncio
async def test_create_order_header_failure(signed_in, gateway, catalog):
    gateway.fail("insert", "orders")

    assert await signed_in.orders.create_order(_takeout(OrderItemCreate(name="X-Burguer"))) is None
    assert signed_in.notifier.last_error().code == NotificationCode.WRITE_FAILED
    assert ("insert", "order_items") not in gateway.calls


@pytest.mark.asyncio
async def test_failed_item_insert_is_skipped(signed_in, gateway, catalog):
    """The order is created with the items that could be written"""
    gateway.fail("insert", "order_items")

    order_id = await signed_in.orders.create_order(_takeout(OrderItemCreate(name="X-Burguer", quantity=1)))

    assert order_id is not None
    assert await _stored_lines(gateway, order_id) == []


@pytest.mark.asyncio
async def test_idempotency_key_returns_existing_order(signed_in, gateway, catalog):
    request = _takeout(OrderItemCreate(name="X-Burguer", quantity=1), idempotency_key="ticket-42")

    first = await signed_in.orders.create_order(request)
    second = await signed_in.orders.create_order(request)

    assert first == second
    assert len((await gateway.select("orders")).data) == 1


@pytest.mark.asyncio
async def test_refresh_orders_newest_first(signed_in, catalog):
    first = await signed_in.orders.create_order(_takeout(OrderItemCreate(name="X-Burguer")))
    second = await signed_in.orders.create_order(_takeout(OrderItemCreate(name="Refrigerante")))

    assert [order.id for order in signed_in.orders.orders] == [second, first]
    assert signed_in.orders.get_order(first).items[0].name == "X-Burguer"


@pytest.mark.asyncio
async def test_item_name_falls_back_to_product(signed_in, gateway, catalog):
    order_id = await signed_in.orders.create_order(_takeout())
    line = (
        await gateway.insert(
            "order_items",
            {"order_id": order_id, "product_id": catalog["Batata Frita"]["id"], "quantity": 1, "unit_price": 15},
        )
    ).data
    anonymous = (await gateway.insert("order_items", {"order_id": order_id, "quantity": 1, "unit_price": 1})).data

    await signed_in.orders.refresh()

    names = {item.id: item.name for item in signed_in.orders.get_order(order_id).items}
    assert names[line["id"]] == "Batata Frita"
    assert names[anonymous["id"]] == f"Item #{anonymous['id']}"


@pytest.mark.asyncio
async def test_next_order_number(signed_in, catalog):
    assert signed_in.orders.next_order_number() == 1001

    await signed_in.orders.create_order(_takeout(OrderItemCreate(name="X-Burguer")))
    await signed_in.orders.create_order(_takeout(OrderItemCreate(name="X-Burguer")))

    assert signed_in.orders.next_order_number() == 1003


@pytest.mark.asyncio
async def test_completed_is_stored_as_ready(signed_in, gateway, catalog):
    order_id = await signed_in.orders.create_order(_takeout(OrderItemCreate(name="X-Burguer")))

    assert await signed_in.orders.update_order_status(order_id, OrderStatus.COMPLETED)

    assert (await _stored_order(gateway, order_id))["status"] == "ready"
    assert signed_in.orders.get_order(order_id).status == OrderStatus.READY


@pytest.mark.asyncio
async def test_any_status_may_follow_any_other(signed_in, gateway, catalog):
    order_id = await signed_in.orders.create_order(_takeout(OrderItemCreate(name="X-Burguer")))

    assert await signed_in.orders.update_order_status(order_id, OrderStatus.PAID)
    assert await signed_in.orders.update_order_status(order_id, OrderStatus.PENDING)

    assert (await _stored_order(gateway, order_id))["status"] == "pending"


@pytest.mark.asyncio
async def test_status_update_failure_leaves_cache(signed_in, gateway, catalog):
    order_id = await signed_in.orders.create_order(_takeout(OrderItemCreate(name="X-Burguer")))
    gateway.fail("update", "orders")

    assert not await signed_in.orders.update_order_status(order_id, OrderStatus.READY)
    assert signed_in.notifier.last_error().code == NotificationCode.WRITE_FAILED
    assert signed_in.orders.get_order(order_id).status == OrderStatus.PENDING


@pytest.mark.asyncio
async def test_add_items_merges_same_product_and_notes(signed_in, gateway, catalog):
    """Two new items matching an existing line become one line"""
    burger = catalog["X-Burguer"]["id"]
    order_id = await signed_in.orders.create_order(
        _takeout(OrderItemCreate(product_id=burger, quantity=3, price=5.0, notes="sem cebola"))
    )

    assert await signed_in.orders.add_items_to_order(
        order_id,
        [
            OrderItemCreate(product_id=burger, quantity=1, price=5.0, notes="sem cebola"),
            OrderItemCreate(product_id=burger, quantity=2, price=5.0, notes="sem cebola"),
        ],
    )

    lines = await _stored_lines(gateway, order_id)
    assert len(lines) == 1
    assert lines[0]["quantity"] == 6
    assert (await _stored_order(gateway, order_id))["total_amount"] == pytest.approx(30.0)


@pytest.mark.asyncio
async def test_add_items_with_different_notes_adds_line(signed_in, gateway, catalog):
    burger = catalog["X-Burguer"]["id"]
    order_id = await signed_in.orders.create_order(_takeout(OrderItemCreate(product_id=burger, quantity=1)))

    assert await signed_in.orders.add_items_to_order(
        order_id, [OrderItemCreate(product_id=burger, quantity=1, notes="bem passado")]
    )

    lines = await _stored_lines(gateway, order_id)
    assert sorted(line["notes"] for line in lines) == ["", "bem passado"]


@pytest.mark.asyncio
async def test_add_items_stops_at_first_failure(signed_in, gateway, catalog):
    order_id = await signed_in.orders.create_order(_takeout(OrderItemCreate(name="X-Burguer", quantity=1)))
    gateway.fail("insert", "order_items")

    assert not await signed_in.orders.add_items_to_order(
        order_id,
        [OrderItemCreate(name="Refrigerante"), OrderItemCreate(name="Batata Frita")],
    )

    assert signed_in.notifier.last_error().code == NotificationCode.WRITE_FAILED
    assert gateway.calls.count(("insert", "order_items")) == 2  # one at creation, one before stopping
    assert (await _stored_order(gateway, order_id))["total_amount"] == pytest.approx(20.0)


@pytest.mark.asyncio
async def test_add_items_to_missing_order(signed_in, catalog):
    missing = "00000000-0000-4000-8000-000000000000"

    assert not await signed_in.orders.add_items_to_order(missing, [OrderItemCreate(name="X-Burguer")])
    assert signed_in.notifier.last_error().code == NotificationCode.NOT_FOUND


@pytest.mark.asyncio
async def test_payment_requires_active_shift(signed_in, gateway, catalog):
    """Nothing is written without an active shift"""
    order_id = await signed_in.orders.create_order(_takeout(OrderItemCreate(name="X-Burguer")))
    gateway.calls.clear()

    assert not await signed_in.orders.process_payment(order_id, PaymentMethod.CASH)

    assert signed_in.notifier.last_error().code == NotificationCode.SHIFT_NOT_ACTIVE
    assert not any(operation != "select" for operation, _ in gateway.calls)
    stored = await _stored_order(gateway, order_id)
    assert stored["status"] == "pending"
    assert stored["paid"] is False


@pytest.mark.asyncio
async def test_pix_payment_bumps_pix_counter(signed_in, gateway, catalog, active_shift):
    order_id = await signed_in.orders.create_order(_takeout(OrderItemCreate(name="X-Burguer")))

    assert await signed_in.orders.process_payment(order_id, PaymentMethod.PIX)

    shift = signed_in.shifts.current_shift
    assert (shift.pix_transactions, shift.total_transactions) == (1, 1)
    assert (shift.cash_transactions, shift.card_transactions) == (0, 0)

    stored = await _stored_order(gateway, order_id)
    assert stored["status"] == "paid"
    assert stored["payment_method"] == "Pix"
    assert stored["paid"] is True
    assert stored["shift_id"] == active_shift.id


@pytest.mark.asyncio
async def test_failed_payment_leaves_shift_untouched(signed_in, gateway, catalog, active_shift):
    order_id = await signed_in.orders.create_order(_takeout(OrderItemCreate(name="X-Burguer")))
    gateway.fail("update", "orders")

    assert not await signed_in.orders.process_payment(order_id, PaymentMethod.CASH)

    shift = (await gateway.select_single("shifts", eq={"id": active_shift.id})).data
    assert shift["total_transactions"] == 0


@pytest.mark.asyncio
async def test_payment_sees_shift_opened_elsewhere(signed_in, gateway, catalog):
    """The active shift is looked up at payment time"""
    order_id = await signed_in.orders.create_order(_takeout(OrderItemCreate(name="X-Burguer")))
    await gateway.insert(
        "shifts",
        {"id": 1, "start_time": "01/01/2024 08:00", "operator_name": "Bruno", "initial_amount": 0, "status": "active"},
    )

    assert await signed_in.orders.process_payment(order_id, PaymentMethod.CREDIT)
    assert signed_in.shifts.current_shift.card_transactions == 1


@pytest.mark.asyncio
async def test_reconcile_repairs_zero_totals(signed_in, gateway, catalog):
    """Orders left at zero by an interrupted creation get their total back"""
    gateway.fail("update", "orders")
    order_id = await signed_in.orders.create_order(
        _takeout(OrderItemCreate(name="X-Burguer", quantity=2), has_service_fee=True)
    )
    empty_id = await signed_in.orders.create_order(_takeout())
    gateway.heal()
    assert (await _stored_order(gateway, order_id))["total_amount"] == 0

    repaired = await signed_in.orders.reconcile_totals()

    assert repaired == [order_id]
    assert (await _stored_order(gateway, order_id))["total_amount"] == pytest.approx(44.0)
    assert (await _stored_order(gateway, empty_id))["total_amount"] == 0


@pytest.mark.asyncio
async def test_takeout_scenario(signed_in, gateway, catalog):
    """Open, sell, pay in cash and close a shift"""
    shift = await signed_in.shifts.open_shift("Ana", 100.0)
    assert shift.status == ShiftStatus.ACTIVE
    assert shift.cash_transactions == 0

    order_id = await signed_in.orders.create_order(
        _takeout(OrderItemCreate(product_id=catalog["X-Burguer"]["id"], quantity=2))
    )
    order = signed_in.orders.get_order(order_id)
    assert signed_in.orders.calculate_order_total(order) == pytest.approx(40.0)

    assert await signed_in.orders.process_payment(order_id, PaymentMethod.CASH)
    assert signed_in.orders.get_order(order_id).status == OrderStatus.PAID
    assert signed_in.shifts.current_shift.cash_transactions == 1
    assert signed_in.shifts.current_shift.total_transactions == 1

    closed = await signed_in.shifts.close_shift(ShiftClose(total=140, cash=140, debit=0, credit=0, pix=0))
    assert closed.status == ShiftStatus.CLOSED
    assert closed.closing_amount == 140
    assert closed.cash_transactions == 1


@pytest.mark.asyncio
async def test_sign_out_clears_orders(signed_in, catalog):
    await signed_in.orders.create_order(_takeout(OrderItemCreate(name="X-Burguer")))

    await signed_in.session.sign_out()

    assert signed_in.orders.orders == []
