"""Inventory API endpoints"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from foodpos.api.deps import failure, get_terminal, notification_mark, require_session
from foodpos.schemas.catalog import (
    QuantityAdjust,
    StockItem,
    StockItemCreate,
    StockItemStatus,
    StockItemUpdate,
    StockValue,
)
from foodpos.terminal import PosTerminal

router = APIRouter(dependencies=[Depends(require_session)])


def _get_or_404(terminal: PosTerminal, item_id: str) -> StockItem:
    item = terminal.inventory.get_item(item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Stock item not found")
    return item


@router.get("", response_model=List[StockItem])
async def list_stock(terminal: PosTerminal = Depends(get_terminal)):
    """All stock items"""
    return terminal.inventory.items


@router.get("/low", response_model=List[StockItem])
async def low_stock(terminal: PosTerminal = Depends(get_terminal)):
    """Items below their minimum"""
    return terminal.inventory.low_stock_items()


@router.get("/value", response_model=StockValue)
async def stock_value(terminal: PosTerminal = Depends(get_terminal)):
    """Purchase value of everything in stock"""
    return StockValue(total=terminal.inventory.stock_value())


@router.get("/categories", response_model=List[str])
async def stock_categories(terminal: PosTerminal = Depends(get_terminal)):
    return terminal.inventory.stock_categories()


@router.get("/{item_id}", response_model=StockItem)
async def get_stock_item(item_id: str, terminal: PosTerminal = Depends(get_terminal)):
    return _get_or_404(terminal, item_id)


@router.get("/{item_id}/status", response_model=StockItemStatus)
async def get_stock_status(item_id: str, terminal: PosTerminal = Depends(get_terminal)):
    """Stock level classification for one item"""
    return terminal.inventory.item_status(_get_or_404(terminal, item_id))


@router.post("", response_model=StockItem, status_code=status.HTTP_201_CREATED)
async def create_stock_item(
    request: StockItemCreate,
    terminal: PosTerminal = Depends(get_terminal),
    mark: int = Depends(notification_mark),
):
    """Add a stock item, creating its product when needed"""
    item = await terminal.inventory.add_stock_item(request)
    if item is None:
        raise failure(terminal, mark, "Failed to add stock item")
    return item


@router.patch("/{item_id}", response_model=StockItem)
async def update_stock_item(
    item_id: str,
    request: StockItemUpdate,
    terminal: PosTerminal = Depends(get_terminal),
    mark: int = Depends(notification_mark),
):
    if not await terminal.inventory.update_stock_item(item_id, request):
        raise failure(terminal, mark, "Failed to update stock item")
    return _get_or_404(terminal, item_id)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_stock_item(
    item_id: str,
    terminal: PosTerminal = Depends(get_terminal),
    mark: int = Depends(notification_mark),
):
    if not await terminal.inventory.delete_stock_item(item_id):
        raise failure(terminal, mark, "Failed to delete stock item")


@router.post("/{item_id}/adjust", response_model=StockItem)
async def adjust_quantity(
    item_id: str,
    request: QuantityAdjust,
    terminal: PosTerminal = Depends(get_terminal),
    mark: int = Depends(notification_mark),
):
    """Add to or remove from an item's quantity"""
    item = await terminal.inventory.update_quantity(item_id, request.quantity, request.increment)
    if item is None:
        raise failure(terminal, mark, "Failed to update stock quantity")
    return item
