"""Catalog store: products with their categories and stock levels"""

from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog

from foodpos.gateway.base import NO_ROWS, BaseGateway
from foodpos.notifications import NotificationCode, Notifier
from foodpos.schemas.auth import AuthEvent, Session
from foodpos.schemas.catalog import Category, Product, ProductCreate, ProductUpdate

logger = structlog.get_logger()

UNCATEGORIZED = "Sem Categoria"


def map_product(row: Dict[str, Any], categories: List[Dict[str, Any]]) -> Product:
    """Convert a products row, naming its category"""
    category = next((c for c in categories if c["id"] == row.get("category_id")), None)
    return Product(
        id=str(row["id"]),
        name=row["name"],
        category=category["name"] if category else UNCATEGORIZED,
        category_id=row.get("category_id"),
        price=float(row.get("price") or 0),
        stock=0,
        active=bool(row.get("available", True)),
        image_url=row.get("image_url") or "",
    )


class CatalogStore:
    """In-memory product catalog, reloaded wholesale after every change"""

    def __init__(self, gateway: BaseGateway, notifier: Notifier):
        self.gateway = gateway
        self.notifier = notifier
        self.products: List[Product] = []
        self.categories: List[Category] = []

    async def on_session_change(self, event: AuthEvent, session: Optional[Session]) -> None:
        if session is None:
            self.products = []
            self.categories = []
            return
        await self.refresh()

    async def refresh(self) -> None:
        categories = await self.gateway.select("categories")
        if not categories.ok:
            logger.error("Failed to load categories", error=categories.error.message)
            self.notifier.error("Failed to load categories", NotificationCode.READ_FAILED)
            return

        products = await self.gateway.select("products")
        if not products.ok:
            logger.error("Failed to load products", error=products.error.message)
            self.notifier.error("Failed to load products", NotificationCode.READ_FAILED)
            return

        # Missing stock data is not fatal: products show zero stock
        stock = await self.gateway.select("stock")
        if not stock.ok:
            logger.error("Failed to load stock", error=stock.error.message)
        stock_rows = stock.data if stock.ok else []

        mapped = []
        for row in products.data:
            product = map_product(row, categories.data)
            stock_row = next((s for s in stock_rows if s.get("product_id") == product.id), None)
            if stock_row:
                product.stock = float(stock_row.get("quantity") or 0)
            mapped.append(product)

        self.categories = [Category(**row) for row in categories.data]
        self.products = mapped

    async def _category_id(self, name: Optional[str]) -> Optional[str]:
        """Id of the category with this exact name, or None"""
        if not name:
            return None
        result = await self.gateway.select_single("categories", eq={"name": name})
        if not result.ok:
            if result.error.code != NO_ROWS:
                logger.error("Failed to look up category", category=name, error=result.error.message)
            return None
        return result.data["id"]

    async def add_product(self, product: ProductCreate) -> Optional[Product]:
        category_id = await self._category_id(product.category)

        result = await self.gateway.insert(
            "products",
            {
                "name": product.name,
                "description": "",
                "price": product.price,
                "image_url": product.image_url,
                "category_id": category_id,
                "available": product.active,
                "featured": False,
            },
        )
        if not result.ok:
            logger.error("Failed to add product", name=product.name, error=result.error.message)
            self.notifier.error("Failed to add product", NotificationCode.WRITE_FAILED)
            return None

        product_id = str(result.data["id"])
        stock = await self.gateway.insert(
            "stock",
            {
                "product_id": product_id,
                "quantity": product.stock,
                "unit": "un",
                "min_stock": 0,
            },
        )
        if not stock.ok:
            logger.error("Failed to add stock entry", product_id=product_id, error=stock.error.message)
            self.notifier.warning("Product added, but its stock entry could not be registered")

        logger.info("Product added", product_id=product_id, name=product.name)
        self.notifier.success(f'Product "{product.name}" added')
        await self.refresh()
        return self.find_cached(product_id)

    async def update_product(self, product_id: str, changes: ProductUpdate) -> bool:
        values: Dict[str, Any] = {}
        if changes.name is not None:
            values["name"] = changes.name
        if changes.price is not None:
            values["price"] = changes.price
        if changes.image_url is not None:
            values["image_url"] = changes.image_url
        if changes.active is not None:
            values["available"] = changes.active
        if changes.category:
            category_id = await self._category_id(changes.category)
            if category_id is not None:
                values["category_id"] = category_id

        if values:
            result = await self.gateway.update("products", values, eq={"id": product_id})
            if not result.ok:
                logger.error("Failed to update product", product_id=product_id, error=result.error.message)
                self.notifier.error("Failed to update product", NotificationCode.WRITE_FAILED)
                return False
            if not result.data:
                self.notifier.error("Product not found", NotificationCode.NOT_FOUND)
                return False

        if changes.stock is not None:
            await self._set_stock(product_id, changes.stock)

        self.notifier.success("Product updated")
        await self.refresh()
        return True

    async def _set_stock(self, product_id: str, quantity: float) -> None:
        """Update the product's stock row, creating it if missing"""
        existing = await self.gateway.select("stock", eq={"product_id": product_id}, limit=1)
        if not existing.ok:
            logger.error("Failed to check stock", product_id=product_id, error=existing.error.message)
            return

        if existing.data:
            result = await self.gateway.update(
                "stock",
                {"quantity": quantity, "last_update": datetime.utcnow().isoformat()},
                eq={"product_id": product_id},
            )
        else:
            result = await self.gateway.insert(
                "stock",
                {"product_id": product_id, "quantity": quantity, "unit": "un", "min_stock": 0},
            )
        if not result.ok:
            logger.error("Failed to save stock", product_id=product_id, error=result.error.message)

    async def delete_product(self, product_id: str) -> bool:
        cached = self.find_cached(product_id)

        result = await self.gateway.delete("products", eq={"id": product_id})
        if not result.ok:
            logger.error("Failed to delete product", product_id=product_id, error=result.error.message)
            self.notifier.error("Failed to delete product", NotificationCode.WRITE_FAILED)
            return False
        if not result.data:
            self.notifier.error("Product not found", NotificationCode.NOT_FOUND)
            return False

        stock = await self.gateway.delete("stock", eq={"product_id": product_id})
        if not stock.ok:
            logger.error("Failed to delete stock", product_id=product_id, error=stock.error.message)

        name = cached.name if cached else result.data[0].get("name")
        logger.info("Product deleted", product_id=product_id)
        self.notifier.success(f'Product "{name}" removed')
        await self.refresh()
        return True

    def find_cached(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.products if p.id == product_id), None)

    async def get_product_by_id(self, product_id: str) -> Optional[Product]:
        """Cached product, falling back to the gateway"""
        cached = self.find_cached(product_id)
        if cached:
            return cached

        result = await self.gateway.select_single("products", eq={"id": product_id})
        if not result.ok:
            if result.error.code != NO_ROWS:
                logger.error("Failed to fetch product", product_id=product_id, error=result.error.message)
            return None

        categories = await self.gateway.select("categories")
        product = map_product(result.data, categories.data if categories.ok else [])

        stock = await self.gateway.select("stock", eq={"product_id": product_id}, limit=1)
        if stock.ok and stock.data:
            product.stock = float(stock.data[0].get("quantity") or 0)
        return product

    async def find_product_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        """First products row whose name matches case-insensitively"""
        if not name:
            return None
        result = await self.gateway.select(
            "products",
            ilike={"name": name},
            order_by="created_at",
            limit=1,
        )
        if not result.ok:
            logger.error("Failed to look up product", name=name, error=result.error.message)
            return None
        return result.data[0] if result.data else None

    async def get_product_row(self, product_id: str) -> Optional[Dict[str, Any]]:
        """Current products row for an id"""
        result = await self.gateway.select_single("products", eq={"id": product_id})
        if not result.ok:
            if result.error.code != NO_ROWS:
                logger.error("Failed to fetch product", product_id=product_id, error=result.error.message)
            return None
        return result.data

    async def get_categories(self) -> List[str]:
        """Names of active categories"""
        result = await self.gateway.select("categories", eq={"active": True}, order_by="name")
        if not result.ok:
            logger.error("Failed to load categories", error=result.error.message)
            return []
        return [row["name"] for row in result.data]
