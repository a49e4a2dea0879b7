"""Tests for shift accounting"""

from datetime import datetime

import pytest

from foodpos.notifications import NotificationCode
from foodpos.schemas.order import PaymentMethod
from foodpos.schemas.shift import ShiftClose, ShiftStatus
from foodpos.services.shifts import ShiftRepository, ShiftService


@pytest.mark.asyncio
async def test_open_shift(signed_in):
    """Opening starts the counters at zero"""
    shift = await signed_in.shifts.open_shift("Ana", 100.0)

    assert shift.id == 1
    assert shift.status == ShiftStatus.ACTIVE
    assert shift.operator_name == "Ana"
    assert shift.initial_amount == 100.0
    assert (
        shift.cash_transactions,
        shift.card_transactions,
        shift.pix_transactions,
        shift.total_transactions,
    ) == (0, 0, 0, 0)
    assert signed_in.shifts.is_shift_active()


@pytest.mark.asyncio
async def test_open_shift_rejected_while_one_is_active(signed_in, active_shift):
    """Only one shift may be active"""
    assert await signed_in.shifts.open_shift("Bruno", 50.0) is None

    error = signed_in.notifier.last_error()
    assert error.code == NotificationCode.SHIFT_ALREADY_ACTIVE

    result = await signed_in.gateway.select("shifts")
    assert len(result.data) == 1


@pytest.mark.asyncio
async def test_close_shift_records_breakdown(signed_in, active_shift):
    closing = ShiftClose(total=140, cash=100, debit=10, credit=20, pix=10)
    closed = await signed_in.shifts.close_shift(closing)

    assert closed.status == ShiftStatus.CLOSED
    assert closed.closing_amount == 140
    assert closed.closing_cash_amount == 100
    assert closed.closing_debit_amount == 10
    assert closed.closing_credit_amount == 20
    assert closed.closing_pix_amount == 10
    assert closed.end_time is not None
    assert not signed_in.shifts.is_shift_active()
    assert signed_in.shifts.current_shift is None


@pytest.mark.asyncio
async def test_close_shift_without_active_shift(signed_in):
    assert await signed_in.shifts.close_shift(ShiftClose(total=0)) is None
    assert signed_in.notifier.last_error().code == NotificationCode.SHIFT_NOT_ACTIVE


@pytest.mark.asyncio
async def test_shift_ids_increase(signed_in):
    """New shifts get one past the highest id"""
    first = await signed_in.shifts.open_shift("Ana", 100.0)
    await signed_in.shifts.close_shift(ShiftClose(total=100, cash=100))
    second = await signed_in.shifts.open_shift("Bruno", 80.0)

    assert (first.id, second.id) == (1, 2)
    assert [shift.id for shift in signed_in.shifts.shifts] == [1, 2]


@pytest.mark.asyncio
async def test_shift_times_use_configured_format(gateway, signed_in):
    clock = lambda: datetime(2024, 3, 9, 18, 5)  # noqa: E731
    service = ShiftService(ShiftRepository(gateway), signed_in.notifier, date_format="%Y-%m-%d", clock=clock)

    shift = await service.open_shift("Ana", 0)

    assert shift.start_time == "2024-03-09 18:05"


@pytest.mark.asyncio
async def test_active_shift_is_read_from_storage(gateway, signed_in, active_shift):
    """A second terminal sees a shift closed by the first"""
    other = ShiftService(ShiftRepository(gateway), signed_in.notifier)
    await other.refresh()
    assert other.is_shift_active()

    await signed_in.shifts.close_shift(ShiftClose(total=100, cash=100))

    assert other.is_shift_active()  # stale until re-read
    assert await other.refresh_current()
    assert not other.is_shift_active()


@pytest.mark.asyncio
async def test_close_fails_when_closed_elsewhere(gateway, signed_in, active_shift):
    """The conditional write refuses a shift that is no longer active"""
    other = ShiftService(ShiftRepository(gateway), signed_in.notifier)
    await other.refresh()
    await other.close_shift(ShiftClose(total=100, cash=100))

    repository = signed_in.shifts.repository
    result = await repository.update_active(active_shift.id, {"status": ShiftStatus.CLOSED.value})
    assert result.ok
    assert result.data == []


@pytest.mark.asyncio
async def test_record_payment_bumps_one_tender(signed_in, active_shift):
    assert await signed_in.shifts.record_payment(PaymentMethod.DEBIT)

    shift = signed_in.shifts.current_shift
    assert shift.card_transactions == 1
    assert shift.total_transactions == 1
    assert shift.cash_transactions == 0
    assert shift.pix_transactions == 0


@pytest.mark.asyncio
async def test_record_payment_without_shift(signed_in):
    assert not await signed_in.shifts.record_payment(PaymentMethod.CASH)


@pytest.mark.asyncio
async def test_shift_read_failure_blocks_open(gateway, signed_in):
    gateway.fail("select", "shifts")

    assert await signed_in.shifts.open_shift("Ana", 100.0) is None
    assert signed_in.notifier.last_error().code == NotificationCode.READ_FAILED


@pytest.mark.asyncio
async def test_shift_write_failure(gateway, signed_in):
    gateway.fail("insert", "shifts")

    assert await signed_in.shifts.open_shift("Ana", 100.0) is None
    assert signed_in.notifier.last_error().code == NotificationCode.WRITE_FAILED
    assert not signed_in.shifts.is_shift_active()


@pytest.mark.asyncio
async def test_sign_out_clears_shift_state(signed_in, active_shift):
    await signed_in.session.sign_out()

    assert signed_in.shifts.current_shift is None
    assert signed_in.shifts.shifts == []
