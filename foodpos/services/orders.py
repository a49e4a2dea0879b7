"""Order lifecycle: creation, status, items and payment"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import structlog

from foodpos.gateway.base import NO_ROWS, BaseGateway
from foodpos.notifications import NotificationCode, Notifier
from foodpos.schemas.auth import AuthEvent, Session
from foodpos.schemas.order import (
    Order,
    OrderCreate,
    OrderItem,
    OrderItemCreate,
    OrderStatus,
    OrderType,
    PaymentMethod,
)
from foodpos.services.pricing import (
    apply_service_fee,
    calculate_order_total,
    find_matching_line,
    normalize_status,
    resolve_item_price,
)
from foodpos.services.shifts import ShiftService

logger = structlog.get_logger()


def _parse_time(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def map_order(row: Dict[str, Any], lines: List[Dict[str, Any]], product_names: Dict[str, str]) -> Order:
    """Convert an orders row and its order_items rows"""
    items = []
    for line in lines:
        product_id = line.get("product_id")
        name = line.get("name") or product_names.get(product_id) or f"Item #{line['id']}"
        items.append(
            OrderItem(
                id=str(line["id"]),
                name=name,
                quantity=int(line["quantity"]),
                notes=line.get("notes") or "",
                product_id=product_id,
                price=float(line.get("unit_price") or 0),
            )
        )

    created_at = _parse_time(row.get("created_at"))
    return Order(
        id=str(row["id"]),
        type=OrderType(row.get("order_type") or OrderType.TAKEOUT.value),
        identifier=row.get("table_number") or row.get("customer_name") or "Cliente",
        time=created_at.strftime("%H:%M") if created_at else "",
        created_at=created_at,
        status=OrderStatus(row["status"]),
        items=items,
        delivery_info=row.get("delivery_info"),
        has_service_fee=bool(row.get("has_service_fee")),
        total_amount=float(row["total_amount"]) if row.get("total_amount") is not None else None,
        payment_method=row.get("payment_method"),
        shift_id=row.get("shift_id"),
        notes=row.get("notes"),
    )


class OrderService:
    """
    Orders kept in memory and reloaded after every change.

    Every step is a separate gateway call: a failure part way through a
    multi-step operation leaves the steps already applied in place.
    """

    def __init__(
        self,
        gateway: BaseGateway,
        notifier: Notifier,
        shifts: ShiftService,
        first_order_number: int = 1001,
    ):
        self.gateway = gateway
        self.notifier = notifier
        self.shifts = shifts
        self.first_order_number = first_order_number
        self.orders: List[Order] = []

    async def on_session_change(self, event: AuthEvent, session: Optional[Session]) -> None:
        if session is None:
            self.orders = []
            return
        await self.refresh()

    async def refresh(self) -> None:
        """Reload all orders, newest first, with their lines"""
        result = await self.gateway.select("orders", order_by="created_at", descending=True)
        if not result.ok:
            logger.error("Failed to load orders", error=result.error.message)
            self.notifier.error("Failed to load orders", NotificationCode.READ_FAILED)
            return

        products = await self.gateway.select("products")
        product_names = {row["id"]: row["name"] for row in products.data} if products.ok else {}

        orders = []
        for row in result.data:
            lines = await self.gateway.select("order_items", eq={"order_id": row["id"]}, order_by="created_at")
            if not lines.ok:
                logger.error("Failed to load order items", order_id=row["id"], error=lines.error.message)
                self.notifier.error("Failed to load orders", NotificationCode.READ_FAILED)
                return
            orders.append(map_order(row, lines.data, product_names))

        self.orders = orders

    def get_order(self, order_id: str) -> Optional[Order]:
        return next((order for order in self.orders if order.id == order_id), None)

    def next_order_number(self) -> int:
        """Display number of the next order"""
        return self.first_order_number + len(self.orders)

    def calculate_order_total(self, order: Order) -> float:
        return calculate_order_total(order)

    async def _lookup_product(self, item: OrderItemCreate) -> Optional[Dict[str, Any]]:
        """Catalog row for an item: by reference, or by case-insensitive name when no reference is given"""
        if item.product_id:
            result = await self.gateway.select_single("products", eq={"id": item.product_id})
        elif item.name:
            result = await self.gateway.select(
                "products",
                ilike={"name": item.name},
                order_by="created_at",
                limit=1,
            )
        else:
            return None

        if not result.ok:
            if result.error.code != NO_ROWS:
                logger.error(
                    "Product lookup failed",
                    product_id=item.product_id,
                    name=item.name,
                    error=result.error.message,
                )
                self.notifier.error(f"Failed to look up price for {item.name or item.product_id}", NotificationCode.READ_FAILED)
            return None
        if isinstance(result.data, list):
            return result.data[0] if result.data else None
        return result.data

    async def _resolve(self, item: OrderItemCreate) -> Tuple[Optional[str], float, str]:
        """(product_id, unit_price, display name) for a requested item"""
        product = await self._lookup_product(item)
        product_id, price = resolve_item_price(item, product)
        name = item.name or (product["name"] if product else "")
        return product_id, price, name

    async def create_order(self, order: OrderCreate) -> Optional[str]:
        """
        Create an order and its lines, returning the new order id.

        The header is written first with a zero total, then one line per
        item, then the final total. A line that fails to insert is skipped.
        """
        if order.idempotency_key:
            existing = await self.gateway.select(
                "orders",
                eq={"idempotency_key": order.idempotency_key},
                limit=1,
            )
            if not existing.ok:
                logger.error("Failed to check idempotency key", error=existing.error.message)
                self.notifier.error("Failed to create order", NotificationCode.READ_FAILED)
                return None
            if existing.data:
                order_id = str(existing.data[0]["id"])
                logger.info("Order already created", order_id=order_id, idempotency_key=order.idempotency_key)
                return order_id

        header = await self.gateway.insert(
            "orders",
            {
                "order_type": order.type.value,
                "customer_name": order.identifier,
                "table_number": order.identifier if order.type == OrderType.TABLE else None,
                "delivery_info": order.delivery_info.model_dump() if order.delivery_info else None,
                "status": OrderStatus.PENDING.value,
                "total_amount": 0,
                "has_service_fee": order.has_service_fee,
                "payment_method": None,
                "paid": False,
                "notes": order.notes or "",
                "idempotency_key": order.idempotency_key,
            },
        )
        if not header.ok:
            logger.error("Failed to create order", error=header.error.message)
            self.notifier.error("Failed to create order", NotificationCode.WRITE_FAILED)
            return None

        order_id = str(header.data["id"])
        subtotal = 0.0
        for item in order.items:
            product_id, price, name = await self._resolve(item)
            subtotal += price * item.quantity

            line = await self.gateway.insert(
                "order_items",
                {
                    "order_id": order_id,
                    "product_id": product_id,
                    "name": name,
                    "quantity": item.quantity,
                    "unit_price": price,
                    "notes": item.notes,
                },
            )
            if not line.ok:
                logger.error("Failed to insert order item", order_id=order_id, item=name, error=line.error.message)

        total = apply_service_fee(subtotal, order.has_service_fee)
        update = await self.gateway.update("orders", {"total_amount": total}, eq={"id": order_id})
        if not update.ok:
            logger.error("Failed to write order total", order_id=order_id, error=update.error.message)
            self.notifier.error("Failed to save order total", NotificationCode.WRITE_FAILED)

        number = self.next_order_number()
        await self.refresh()

        logger.info("Order created", order_id=order_id, items=len(order.items), total=total)
        self.notifier.success(f"Order #{number} created")
        return order_id

    async def update_order_status(self, order_id: str, status: OrderStatus) -> bool:
        """
        Set the order's status. ``completed`` is stored as ``ready``.
        Any status may follow any other.
        """
        stored = normalize_status(status)
        result = await self.gateway.update("orders", {"status": stored.value}, eq={"id": order_id})
        if not result.ok:
            logger.error("Failed to update order status", order_id=order_id, error=result.error.message)
            self.notifier.error("Failed to update order status", NotificationCode.WRITE_FAILED)
            return False
        if not result.data:
            self.notifier.error("Order not found", NotificationCode.NOT_FOUND)
            return False

        await self.refresh()

        logger.info("Order status updated", order_id=order_id, status=stored.value)
        if status == OrderStatus.COMPLETED:
            self.notifier.success("Order completed and ready for payment")
        else:
            self.notifier.success(f"Order status updated to: {stored.value}")
        return True

    async def add_items_to_order(self, order_id: str, items: List[OrderItemCreate]) -> bool:
        """
        Merge new items into an order and add their amount to its stored total.

        The service fee is not applied to the added amount. The first failed
        write stops the operation; items already applied stay.
        """
        header = await self.gateway.select_single("orders", eq={"id": order_id})
        if not header.ok:
            if header.error.code == NO_ROWS:
                self.notifier.error("Order not found", NotificationCode.NOT_FOUND)
            else:
                logger.error("Failed to load order", order_id=order_id, error=header.error.message)
                self.notifier.error("Failed to add items to order", NotificationCode.READ_FAILED)
            return False

        lines = await self.gateway.select("order_items", eq={"order_id": order_id}, order_by="created_at")
        if not lines.ok:
            logger.error("Failed to load order items", order_id=order_id, error=lines.error.message)
            self.notifier.error("Failed to add items to order", NotificationCode.READ_FAILED)
            return False
        existing = list(lines.data)

        added = 0.0
        for item in items:
            product_id, price, name = await self._resolve(item)
            added += price * item.quantity

            line = find_matching_line(existing, product_id, name, item.notes)
            if line is not None:
                result = await self.gateway.update(
                    "order_items",
                    {"quantity": int(line["quantity"]) + item.quantity},
                    eq={"id": line["id"]},
                )
                if result.ok and result.data:
                    line.update(result.data[0])
            else:
                result = await self.gateway.insert(
                    "order_items",
                    {
                        "order_id": order_id,
                        "product_id": product_id,
                        "name": name,
                        "quantity": item.quantity,
                        "unit_price": price,
                        "notes": item.notes,
                    },
                )
                if result.ok:
                    existing.append(result.data)

            if not result.ok:
                logger.error("Failed to add order item", order_id=order_id, item=name, error=result.error.message)
                self.notifier.error("Failed to add items to order", NotificationCode.WRITE_FAILED)
                await self.refresh()
                return False

        total = float(header.data.get("total_amount") or 0) + added
        update = await self.gateway.update("orders", {"total_amount": total}, eq={"id": order_id})
        if not update.ok:
            logger.error("Failed to write order total", order_id=order_id, error=update.error.message)
            self.notifier.error("Failed to add items to order", NotificationCode.WRITE_FAILED)
            await self.refresh()
            return False

        await self.refresh()

        logger.info("Items added to order", order_id=order_id, items=len(items), added=added)
        self.notifier.success("Items added to order")
        return True

    async def process_payment(self, order_id: str, method: PaymentMethod) -> bool:
        """
        Mark the order paid and count the payment on the active shift.
        Rejected without any write when no shift is active.
        """
        if not await self.shifts.refresh_current():
            return False

        if not self.shifts.is_shift_active():
            logger.warning("Payment rejected without active shift", order_id=order_id)
            self.notifier.error(
                "Payments cannot be processed without an active shift. Open a shift first.",
                NotificationCode.SHIFT_NOT_ACTIVE,
            )
            return False

        shift_id = self.shifts.current_shift.id
        result = await self.gateway.update(
            "orders",
            {
                "status": OrderStatus.PAID.value,
                "payment_method": method.value,
                "paid": True,
                "shift_id": shift_id,
            },
            eq={"id": order_id},
        )
        if not result.ok:
            logger.error("Failed to process payment", order_id=order_id, error=result.error.message)
            self.notifier.error("Failed to process payment", NotificationCode.WRITE_FAILED)
            return False
        if not result.data:
            self.notifier.error("Order not found", NotificationCode.NOT_FOUND)
            return False

        if not await self.shifts.record_payment(method):
            self.notifier.warning("Payment recorded, but the shift counters could not be updated")

        await self.refresh()

        logger.info("Payment processed", order_id=order_id, method=method.value, shift_id=shift_id)
        self.notifier.success("Payment processed")
        return True

    async def reconcile_totals(self) -> List[str]:
        """
        Recompute the total of orders left at zero with lines attached,
        as happens when creation stops before writing the total.
        Returns the ids of the repaired orders.
        """
        result = await self.gateway.select("orders", eq={"total_amount": 0})
        if not result.ok:
            logger.error("Failed to load orders for reconciliation", error=result.error.message)
            self.notifier.error("Failed to reconcile order totals", NotificationCode.READ_FAILED)
            return []

        repaired = []
        for row in result.data:
            lines = await self.gateway.select("order_items", eq={"order_id": row["id"]})
            if not lines.ok or not lines.data:
                continue

            subtotal = sum(float(line.get("unit_price") or 0) * int(line["quantity"]) for line in lines.data)
            total = apply_service_fee(subtotal, bool(row.get("has_service_fee")))
            if total == 0:
                continue

            update = await self.gateway.update("orders", {"total_amount": total}, eq={"id": row["id"]})
            if not update.ok:
                logger.error("Failed to repair order total", order_id=row["id"], error=update.error.message)
                continue
            repaired.append(str(row["id"]))

        if repaired:
            logger.info("Order totals reconciled", orders=repaired)
            await self.refresh()
        return repaired
