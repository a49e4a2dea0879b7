#!/usr/bin/env python3
"""
Seed script to create a demo operator, catalog and stock
"""

import asyncio
import uuid

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


async def seed_demo_data():
    """Seed demo data for development"""
    from sqlalchemy import select

    from foodpos.database import SessionLocal, create_all
    from foodpos.models import Category, Product, Profile, StockItem

    # Create tables
    await create_all()

    async with SessionLocal() as db:
        # Check if demo operator already exists
        result = await db.execute(
            select(Profile).where(Profile.email == "caixa@foodpos.dev")
        )
        existing = result.scalar_one_or_none()

        if existing:
            print("Demo data already exists. Skipping...")
            return

        print("Creating demo operator...")

        operator = Profile(
            id=uuid.uuid4(),
            email="caixa@foodpos.dev",
            hashed_password=pwd_context.hash("caixa123"),
            full_name="Ana Souza",
            role="manager",
        )
        db.add(operator)

        print("Creating categories...")

        categories = {
            "Lanches": Category(name="Lanches", color="#f97316", icon="sandwich"),
            "Porções": Category(name="Porções", color="#eab308", icon="utensils"),
            "Bebidas": Category(name="Bebidas", color="#0ea5e9", icon="cup-soda"),
            "Sobremesas": Category(name="Sobremesas", color="#ec4899", icon="ice-cream"),
        }
        for category in categories.values():
            db.add(category)
        await db.flush()

        print("Creating products...")

        products = [
            # Lanches
            {"name": "X-Burguer", "price": 22.0, "category": "Lanches", "stock": 40, "featured": True},
            {"name": "X-Salada", "price": 24.0, "category": "Lanches", "stock": 40},
            {"name": "X-Bacon", "price": 27.0, "category": "Lanches", "stock": 30},
            {"name": "Misto Quente", "price": 14.0, "category": "Lanches", "stock": 25},

            # Porções
            {"name": "Batata Frita", "price": 20.0, "category": "Porções", "stock": 15, "featured": True},
            {"name": "Onion Rings", "price": 23.0, "category": "Porções", "stock": 10},

            # Bebidas
            {"name": "Refrigerante Lata", "price": 6.0, "category": "Bebidas", "stock": 96},
            {"name": "Suco Natural", "price": 9.0, "category": "Bebidas", "stock": 20},
            {"name": "Água Mineral", "price": 4.0, "category": "Bebidas", "stock": 48},

            # Sobremesas
            {"name": "Pudim", "price": 10.0, "category": "Sobremesas", "stock": 8},
            {"name": "Brownie", "price": 12.0, "category": "Sobremesas", "stock": 12},
        ]

        for item_data in products:
            product = Product(
                name=item_data["name"],
                description="",
                price=item_data["price"],
                category_id=categories[item_data["category"]].id,
                available=True,
                featured=item_data.get("featured", False),
            )
            db.add(product)
            await db.flush()

            db.add(
                StockItem(
                    product_id=product.id,
                    quantity=item_data["stock"],
                    unit="un",
                    min_stock=5,
                    category="Bebidas" if item_data["category"] == "Bebidas" else "Ingredientes",
                )
            )

        await db.commit()

        print(f"""
Demo data created successfully!

Operator:
  Email: caixa@foodpos.dev
  Password: caixa123

Catalog: {len(categories)} categories, {len(products)} products with stock
""")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
