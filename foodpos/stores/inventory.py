"""Inventory store: stock rows joined with their products"""

from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog

from foodpos.gateway.base import BaseGateway
from foodpos.notifications import NotificationCode, Notifier
from foodpos.schemas.auth import AuthEvent, Session
from foodpos.schemas.catalog import (
    StockItem,
    StockItemCategory,
    StockItemCreate,
    StockItemStatus,
    StockItemUpdate,
    StockStatus,
)

logger = structlog.get_logger()


def map_stock_item(row: Dict[str, Any], products: Dict[str, Dict[str, Any]]) -> StockItem:
    product = products.get(row.get("product_id")) or {}
    try:
        category = StockItemCategory(row.get("category") or StockItemCategory.INGREDIENTS.value)
    except ValueError:
        category = StockItemCategory.OTHER
    return StockItem(
        id=str(row["id"]),
        name=product.get("name") or "Produto sem nome",
        category=category,
        quantity=float(row.get("quantity") or 0),
        unit=row.get("unit") or "un",
        min_stock=float(row.get("min_stock") or 0),
        purchase_price=row.get("purchase_price"),
        last_update=row.get("last_update"),
        image_url=product.get("image_url") or "",
        product_id=row.get("product_id"),
    )


def stock_status(item: StockItem, low_multiplier: float = 1.5) -> StockStatus:
    """Classify an item's quantity against its minimum"""
    if item.quantity <= 0:
        return StockStatus.OUT
    if item.quantity < item.min_stock:
        return StockStatus.CRITICAL
    if item.quantity < item.min_stock * low_multiplier:
        return StockStatus.LOW
    return StockStatus.OK


class InventoryStore:
    """In-memory stock levels, reloaded wholesale after every change"""

    def __init__(self, gateway: BaseGateway, notifier: Notifier, low_stock_multiplier: float = 1.5):
        self.gateway = gateway
        self.notifier = notifier
        self.low_stock_multiplier = low_stock_multiplier
        self.items: List[StockItem] = []

    async def on_session_change(self, event: AuthEvent, session: Optional[Session]) -> None:
        if session is None:
            self.items = []
            return
        await self.refresh()

    async def refresh(self) -> None:
        stock = await self.gateway.select("stock", order_by="last_update", descending=True)
        if not stock.ok:
            logger.error("Failed to load stock", error=stock.error.message)
            self.notifier.error("Failed to load stock", NotificationCode.READ_FAILED)
            return

        products = await self.gateway.select("products")
        if not products.ok:
            logger.error("Failed to load products", error=products.error.message)
            self.notifier.error("Failed to load stock", NotificationCode.READ_FAILED)
            return

        by_id = {row["id"]: row for row in products.data}
        self.items = [map_stock_item(row, by_id) for row in stock.data]

    def get_item(self, item_id: str) -> Optional[StockItem]:
        return next((item for item in self.items if item.id == item_id), None)

    async def _product_for(self, item: StockItemCreate) -> Optional[str]:
        """Id of the product named like the item, creating it if needed"""
        if item.product_id:
            return item.product_id

        existing = await self.gateway.select("products", eq={"name": item.name}, limit=1)
        if not existing.ok:
            logger.error("Failed to look up product", name=item.name, error=existing.error.message)
            return None
        if existing.data:
            return existing.data[0]["id"]

        created = await self.gateway.insert(
            "products",
            {
                "name": item.name,
                "description": "",
                "price": 0,
                "available": True,
                "featured": False,
            },
        )
        if not created.ok:
            logger.error("Failed to create product for stock item", name=item.name, error=created.error.message)
            return None
        return created.data["id"]

    async def add_stock_item(self, item: StockItemCreate) -> Optional[StockItem]:
        product_id = await self._product_for(item)
        if product_id is None:
            self.notifier.error("Failed to add stock item", NotificationCode.WRITE_FAILED)
            return None

        result = await self.gateway.insert(
            "stock",
            {
                "product_id": product_id,
                "quantity": item.quantity,
                "unit": item.unit,
                "min_stock": item.min_stock,
                "purchase_price": item.purchase_price,
                "category": item.category.value,
                "last_update": datetime.utcnow().isoformat(),
            },
        )
        if not result.ok:
            logger.error("Failed to add stock item", name=item.name, error=result.error.message)
            self.notifier.error("Failed to add stock item", NotificationCode.WRITE_FAILED)
            return None

        item_id = str(result.data["id"])
        logger.info("Stock item added", item_id=item_id, product_id=product_id)
        self.notifier.success(f'"{item.name}" added to stock')
        await self.refresh()
        return self.get_item(item_id)

    async def update_stock_item(self, item_id: str, changes: StockItemUpdate) -> bool:
        values: Dict[str, Any] = {"last_update": datetime.utcnow().isoformat()}
        if changes.quantity is not None:
            values["quantity"] = changes.quantity
        if changes.unit is not None:
            values["unit"] = changes.unit
        if changes.min_stock is not None:
            values["min_stock"] = changes.min_stock
        if changes.purchase_price is not None:
            values["purchase_price"] = changes.purchase_price
        if changes.category is not None:
            values["category"] = changes.category.value

        result = await self.gateway.update("stock", values, eq={"id": item_id})
        if not result.ok:
            logger.error("Failed to update stock item", item_id=item_id, error=result.error.message)
            self.notifier.error("Failed to update stock item", NotificationCode.WRITE_FAILED)
            return False
        if not result.data:
            self.notifier.error("Stock item not found", NotificationCode.NOT_FOUND)
            return False

        product_id = result.data[0].get("product_id")
        if changes.name and product_id:
            renamed = await self.gateway.update("products", {"name": changes.name}, eq={"id": product_id})
            if not renamed.ok:
                logger.error("Failed to rename product", product_id=product_id, error=renamed.error.message)

        self.notifier.success("Stock item updated")
        await self.refresh()
        return True

    async def delete_stock_item(self, item_id: str) -> bool:
        result = await self.gateway.delete("stock", eq={"id": item_id})
        if not result.ok:
            logger.error("Failed to delete stock item", item_id=item_id, error=result.error.message)
            self.notifier.error("Failed to delete stock item", NotificationCode.WRITE_FAILED)
            return False
        if not result.data:
            self.notifier.error("Stock item not found", NotificationCode.NOT_FOUND)
            return False

        logger.info("Stock item deleted", item_id=item_id)
        self.notifier.success("Stock item removed")
        await self.refresh()
        return True

    async def update_quantity(self, item_id: str, quantity: float, increment: bool = True) -> Optional[StockItem]:
        """Add or remove ``quantity``; the result never goes below zero"""
        current = await self.gateway.select_single("stock", eq={"id": item_id})
        if not current.ok:
            self.notifier.error("Stock item not found", NotificationCode.NOT_FOUND)
            return None

        before = float(current.data.get("quantity") or 0)
        after = before + quantity if increment else max(0.0, before - quantity)

        result = await self.gateway.update(
            "stock",
            {"quantity": after, "last_update": datetime.utcnow().isoformat()},
            eq={"id": item_id},
        )
        if not result.ok:
            logger.error("Failed to update stock quantity", item_id=item_id, error=result.error.message)
            self.notifier.error("Failed to update stock quantity", NotificationCode.WRITE_FAILED)
            return None

        await self.refresh()
        item = self.get_item(item_id)
        if item is None:
            return None

        logger.info("Stock quantity updated", item_id=item_id, before=before, after=after)
        if item.quantity <= item.min_stock:
            self.notifier.warning(f'"{item.name}" is at or below its minimum stock ({item.min_stock:g} {item.unit})')
        else:
            self.notifier.success(f'"{item.name}" stock updated')
        return item

    def stock_status(self, item: StockItem) -> StockStatus:
        return stock_status(item, self.low_stock_multiplier)

    def item_status(self, item: StockItem) -> StockItemStatus:
        return StockItemStatus(
            id=item.id,
            name=item.name,
            quantity=item.quantity,
            min_stock=item.min_stock,
            status=self.stock_status(item),
        )

    def low_stock_items(self) -> List[StockItem]:
        return [item for item in self.items if item.quantity < item.min_stock]

    def stock_categories(self) -> List[str]:
        return [category.value for category in StockItemCategory]

    def stock_value(self) -> float:
        return sum(item.quantity * (item.purchase_price or 0) for item in self.items)
