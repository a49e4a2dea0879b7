"""
Order pricing and lifecycle rules.

Pure functions with no I/O: the order and shift services fetch the state,
ask these functions what to do, and perform the writes.
"""

from typing import Any, Dict, Iterable, Optional, Tuple

from foodpos.schemas.order import Order, OrderItemCreate, OrderStatus, PaymentMethod
from foodpos.schemas.shift import Shift

# Flat 10% surcharge applied to the item subtotal at creation
SERVICE_FEE_MULTIPLIER = 1.10


def apply_service_fee(subtotal: float, has_service_fee: bool) -> float:
    return subtotal * SERVICE_FEE_MULTIPLIER if has_service_fee else subtotal


def resolve_item_price(
    item: OrderItemCreate,
    product: Optional[Dict[str, Any]],
) -> Tuple[Optional[str], float]:
    """
    Return (product_id, unit_price) for a requested item.

    ``product`` is the catalog row found for the item, by reference or by
    name, or None when the lookup missed. An explicit price always wins;
    otherwise the catalog price is used, and a miss prices the item at 0.
    A supplied reference is kept even when no catalog row matches it.
    """
    product_id = str(product["id"]) if product else item.product_id
    if item.price is not None:
        return product_id, float(item.price)
    if product is not None:
        return product_id, float(product.get("price") or 0)
    return product_id, 0.0


def calculate_order_total(order: Order) -> float:
    """Stored total if there is one, otherwise computed from the lines"""
    if order.total_amount is not None:
        return order.total_amount

    subtotal = sum((item.price or 0) * item.quantity for item in order.items)
    return apply_service_fee(subtotal, order.has_service_fee)


def normalize_status(status: OrderStatus) -> OrderStatus:
    """COMPLETED is stored as READY (ready for payment)"""
    if status == OrderStatus.COMPLETED:
        return OrderStatus.READY
    return status


def find_matching_line(
    lines: Iterable[Dict[str, Any]],
    product_id: Optional[str],
    name: str,
    notes: str,
) -> Optional[Dict[str, Any]]:
    """
    Existing line a new item should be merged into: same product and
    identical notes. Lines without a product match on name instead.
    """
    for line in lines:
        if (line.get("notes") or "") != notes:
            continue
        if product_id is not None:
            if line.get("product_id") == product_id:
                return line
        elif line.get("product_id") is None and (line.get("name") or "") == name:
            return line
    return None


def tender_counter(method: PaymentMethod) -> str:
    """Shift counter bumped by a payment with the given method"""
    if method == PaymentMethod.CASH:
        return "cash_transactions"
    if method in (PaymentMethod.CREDIT, PaymentMethod.DEBIT):
        return "card_transactions"
    return "pix_transactions"


def bump_counters(shift: Shift, method: PaymentMethod) -> Dict[str, int]:
    """New counter values after one payment"""
    counter = tender_counter(method)
    return {
        counter: getattr(shift, counter) + 1,
        "total_transactions": shift.total_transactions + 1,
    }
