"""Cash register shift accounting"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import structlog

from foodpos.gateway.base import BaseGateway, GatewayResult
from foodpos.notifications import NotificationCode, Notifier
from foodpos.schemas.auth import AuthEvent, Session
from foodpos.schemas.order import PaymentMethod
from foodpos.schemas.shift import Shift, ShiftClose, ShiftStatus
from foodpos.services.pricing import bump_counters

logger = structlog.get_logger()


class ShiftRepository:
    """
    Shift rows in the ``shifts`` collection.

    The active shift is always read from storage; writes to it are
    conditional on the row still being active.
    """

    table = "shifts"

    def __init__(self, gateway: BaseGateway):
        self.gateway = gateway

    async def list_all(self) -> GatewayResult:
        return await self.gateway.select(self.table, order_by="id")

    async def get_active(self) -> GatewayResult:
        """Active row in ``data``, or None when no shift is active"""
        result = await self.gateway.select(
            self.table,
            eq={"status": ShiftStatus.ACTIVE.value},
            limit=1,
        )
        if result.ok:
            result.data = result.data[0] if result.data else None
        return result

    async def next_id(self) -> GatewayResult:
        """One past the highest existing id, or 1 for the first shift"""
        result = await self.gateway.select(self.table, order_by="id", descending=True, limit=1)
        if result.ok:
            result.data = int(result.data[0]["id"]) + 1 if result.data else 1
        return result

    async def create(self, values: Dict[str, Any]) -> GatewayResult:
        return await self.gateway.insert(self.table, values)

    async def update_active(self, shift_id: int, values: Dict[str, Any]) -> GatewayResult:
        """Update the shift only while it is still active; ``data`` is empty otherwise"""
        return await self.gateway.update(
            self.table,
            values,
            eq={"id": shift_id, "status": ShiftStatus.ACTIVE.value},
        )


class ShiftService:
    """Open, close and account payments against the active shift"""

    def __init__(
        self,
        repository: ShiftRepository,
        notifier: Notifier,
        date_format: str = "%d/%m/%Y",
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.repository = repository
        self.notifier = notifier
        self.date_format = date_format
        self.clock = clock
        self.shifts: List[Shift] = []
        self.current_shift: Optional[Shift] = None

    def _timestamp(self) -> str:
        now = self.clock()
        return f"{now.strftime(self.date_format)} {now.strftime('%H:%M')}"

    def is_shift_active(self) -> bool:
        return self.current_shift is not None and self.current_shift.status == ShiftStatus.ACTIVE

    async def refresh_current(self) -> bool:
        """Re-read the active shift from storage. False if the read failed."""
        result = await self.repository.get_active()
        if not result.ok:
            logger.error("Failed to load active shift", error=result.error.message)
            self.notifier.error("Failed to load the current shift", NotificationCode.READ_FAILED)
            return False

        self.current_shift = Shift(**result.data) if result.data else None
        return True

    async def refresh(self) -> None:
        result = await self.repository.list_all()
        if not result.ok:
            logger.error("Failed to load shifts", error=result.error.message)
            self.notifier.error("Failed to load shifts", NotificationCode.READ_FAILED)
            return

        self.shifts = [Shift(**row) for row in result.data]
        self.current_shift = next(
            (shift for shift in self.shifts if shift.status == ShiftStatus.ACTIVE),
            None,
        )

    async def on_session_change(self, event: AuthEvent, session: Optional[Session]) -> None:
        if session is None:
            self.shifts = []
            self.current_shift = None
            return
        await self.refresh()

    async def open_shift(self, operator_name: str, initial_amount: float) -> Optional[Shift]:
        if not await self.refresh_current():
            return None

        if self.is_shift_active():
            logger.warning("Shift already active", shift_id=self.current_shift.id)
            self.notifier.error(
                "A shift is already active. Close the current shift before opening a new one.",
                NotificationCode.SHIFT_ALREADY_ACTIVE,
            )
            return None

        next_id = await self.repository.next_id()
        if not next_id.ok:
            self.notifier.error("Failed to open shift", NotificationCode.WRITE_FAILED)
            return None

        result = await self.repository.create(
            {
                "id": next_id.data,
                "start_time": self._timestamp(),
                "operator_name": operator_name,
                "initial_amount": initial_amount,
                "status": ShiftStatus.ACTIVE.value,
                "cash_transactions": 0,
                "card_transactions": 0,
                "pix_transactions": 0,
                "total_transactions": 0,
            }
        )
        if not result.ok:
            logger.error("Failed to open shift", error=result.error.message)
            self.notifier.error("Failed to open shift", NotificationCode.WRITE_FAILED)
            return None

        shift = Shift(**result.data)
        self.current_shift = shift
        await self.refresh()

        logger.info("Shift opened", shift_id=shift.id, operator=operator_name)
        self.notifier.success(f"Shift #{shift.id} opened")
        return shift

    async def close_shift(self, closing: ShiftClose) -> Optional[Shift]:
        if not await self.refresh_current():
            return None

        if not self.is_shift_active():
            logger.warning("No active shift to close")
            self.notifier.error("There is no active shift to close.", NotificationCode.SHIFT_NOT_ACTIVE)
            return None

        shift_id = self.current_shift.id
        result = await self.repository.update_active(
            shift_id,
            {
                "end_time": self._timestamp(),
                "closing_amount": closing.total,
                "closing_cash_amount": closing.cash,
                "closing_debit_amount": closing.debit,
                "closing_credit_amount": closing.credit,
                "closing_pix_amount": closing.pix,
                "status": ShiftStatus.CLOSED.value,
            },
        )
        if not result.ok:
            logger.error("Failed to close shift", shift_id=shift_id, error=result.error.message)
            self.notifier.error("Failed to close shift", NotificationCode.WRITE_FAILED)
            return None

        if not result.data:
            logger.warning("Shift closed elsewhere", shift_id=shift_id)
            self.notifier.error("There is no active shift to close.", NotificationCode.SHIFT_NOT_ACTIVE)
            await self.refresh()
            return None

        closed = Shift(**result.data[0])
        self.current_shift = None
        await self.refresh()

        logger.info("Shift closed", shift_id=closed.id, closing_amount=closed.closing_amount)
        self.notifier.success(f"Shift #{closed.id} closed")
        return closed

    async def record_payment(self, method: PaymentMethod) -> bool:
        """Bump the active shift's counters for one payment"""
        if not self.is_shift_active():
            return False

        shift_id = self.current_shift.id
        result = await self.repository.update_active(shift_id, bump_counters(self.current_shift, method))
        if not result.ok or not result.data:
            logger.error(
                "Failed to update shift counters",
                shift_id=shift_id,
                error=result.error.message if result.error else "shift no longer active",
            )
            return False

        self.current_shift = Shift(**result.data[0])
        self.shifts = [self.current_shift if shift.id == shift_id else shift for shift in self.shifts]
        return True
