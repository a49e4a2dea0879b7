"""Order management API endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from foodpos.api.deps import failure, get_terminal, notification_mark, require_session
from foodpos.schemas.order import (
    Order,
    OrderCreate,
    OrderCreated,
    OrderItemsAdd,
    OrderStatus,
    OrderStatusUpdate,
    OrderTotal,
    PaymentRequest,
    ReconcileResult,
)
from foodpos.terminal import PosTerminal

router = APIRouter(dependencies=[Depends(require_session)])


def _get_or_404(terminal: PosTerminal, order_id: str) -> Order:
    order = terminal.orders.get_order(order_id)
    if order is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order


@router.get("", response_model=List[Order])
async def list_orders(
    status: Optional[OrderStatus] = None,
    terminal: PosTerminal = Depends(get_terminal),
):
    """List orders, newest first"""
    orders = terminal.orders.orders
    if status:
        orders = [order for order in orders if order.status == status]
    return orders


@router.get("/next-number")
async def next_order_number(terminal: PosTerminal = Depends(get_terminal)):
    """Display number the next order will get"""
    return {"order_number": terminal.orders.next_order_number()}


@router.post("", response_model=OrderCreated, status_code=status.HTTP_201_CREATED)
async def create_order(
    request: OrderCreate,
    terminal: PosTerminal = Depends(get_terminal),
    mark: int = Depends(notification_mark),
):
    """Create a new order with its items"""
    number = terminal.orders.next_order_number()
    order_id = await terminal.orders.create_order(request)
    if order_id is None:
        raise failure(terminal, mark, "Failed to create order")
    return OrderCreated(id=order_id, order_number=number)


@router.post("/reconcile", response_model=ReconcileResult)
async def reconcile_totals(terminal: PosTerminal = Depends(get_terminal)):
    """Recompute totals of orders left at zero"""
    return ReconcileResult(repaired=await terminal.orders.reconcile_totals())


@router.get("/{order_id}", response_model=Order)
async def get_order(order_id: str, terminal: PosTerminal = Depends(get_terminal)):
    """Get order details"""
    return _get_or_404(terminal, order_id)


@router.get("/{order_id}/total", response_model=OrderTotal)
async def get_order_total(order_id: str, terminal: PosTerminal = Depends(get_terminal)):
    """Order total, including the service fee when it applies"""
    order = _get_or_404(terminal, order_id)
    return OrderTotal(order_id=order.id, total=terminal.orders.calculate_order_total(order))


@router.patch("/{order_id}/status", response_model=Order)
async def update_order_status(
    order_id: str,
    request: OrderStatusUpdate,
    terminal: PosTerminal = Depends(get_terminal),
    mark: int = Depends(notification_mark),
):
    """Move an order to another status"""
    if not await terminal.orders.update_order_status(order_id, request.status):
        raise failure(terminal, mark, "Failed to update order status")
    return _get_or_404(terminal, order_id)


@router.post("/{order_id}/items", response_model=Order)
async def add_items(
    order_id: str,
    request: OrderItemsAdd,
    terminal: PosTerminal = Depends(get_terminal),
    mark: int = Depends(notification_mark),
):
    """Add items to an existing order"""
    if not await terminal.orders.add_items_to_order(order_id, request.items):
        raise failure(terminal, mark, "Failed to add items to order")
    return _get_or_404(terminal, order_id)


@router.post("/{order_id}/payment", response_model=Order)
async def process_payment(
    order_id: str,
    request: PaymentRequest,
    terminal: PosTerminal = Depends(get_terminal),
    mark: int = Depends(notification_mark),
):
    """Pay an order against the active shift"""
    if not await terminal.orders.process_payment(order_id, request.payment_method):
        raise failure(terminal, mark, "Failed to process payment")
    return _get_or_404(terminal, order_id)
