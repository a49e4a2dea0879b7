"""Product catalog API endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from foodpos.api.deps import failure, get_terminal, notification_mark, require_session
from foodpos.schemas.catalog import Product, ProductCreate, ProductUpdate
from foodpos.terminal import PosTerminal

router = APIRouter(dependencies=[Depends(require_session)])


@router.get("", response_model=List[Product])
async def list_products(
    category: Optional[str] = None,
    active_only: bool = False,
    terminal: PosTerminal = Depends(get_terminal),
):
    """List catalog products"""
    products = terminal.catalog.products
    if category:
        products = [p for p in products if p.category == category]
    if active_only:
        products = [p for p in products if p.active]
    return products


@router.get("/categories", response_model=List[str])
async def list_categories(terminal: PosTerminal = Depends(get_terminal)):
    """Names of active categories"""
    return await terminal.catalog.get_categories()


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str, terminal: PosTerminal = Depends(get_terminal)):
    """Get product details"""
    product = await terminal.catalog.get_product_by_id(product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
async def create_product(
    request: ProductCreate,
    terminal: PosTerminal = Depends(get_terminal),
    mark: int = Depends(notification_mark),
):
    """Add a product and its stock entry"""
    product = await terminal.catalog.add_product(request)
    if product is None:
        raise failure(terminal, mark, "Failed to add product")
    return product


@router.patch("/{product_id}", response_model=Product)
async def update_product(
    product_id: str,
    request: ProductUpdate,
    terminal: PosTerminal = Depends(get_terminal),
    mark: int = Depends(notification_mark),
):
    """Update product fields"""
    if not await terminal.catalog.update_product(product_id, request):
        raise failure(terminal, mark, "Failed to update product")
    return await get_product(product_id, terminal)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: str,
    terminal: PosTerminal = Depends(get_terminal),
    mark: int = Depends(notification_mark),
):
    """Delete a product and its stock entries"""
    if not await terminal.catalog.delete_product(product_id):
        raise failure(terminal, mark, "Failed to delete product")
