"""
Product service — the catalogue that offers and subscriptions point at.

Only as much catalogue management as the offer/subscription flow needs:
create a product, attach a price per billing cycle, list, and resolve a
price that is still open for business.
"""

import uuid
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.exceptions import DuplicateResourceError, ResourceNotFoundError
from bizdesk.models.product import Product, ProductPrice


async def create_product(
    db: AsyncSession,
    name: str,
    code: str,
    description: str | None = None,
) -> Product:
    """
    Create a product with no prices yet.

    Raises:
        DuplicateResourceError: If the name or code is already used.
    """
    existing = await db.execute(
        select(Product).where((Product.name == name) | (Product.code == code))
    )
    if existing.scalars().first() is not None:
        raise DuplicateResourceError(f"A product named '{name}' or coded '{code}' already exists")

    # prices=[] marks the collection as loaded so the response can read it
    product = Product(name=name, code=code, description=description, prices=[])
    db.add(product)
    await db.flush()
    return product


async def add_price(
    db: AsyncSession,
    product_id: uuid.UUID,
    billing_cycle: str,
    price: Decimal,
    term_months: int,
) -> ProductPrice:
    """
    Attach a price for one billing cycle to a product.

    Raises:
        ResourceNotFoundError: If the product doesn't exist.
        DuplicateResourceError: If the product already has a price for the cycle.
    """
    product = await db.get(Product, product_id)
    if product is None:
        raise ResourceNotFoundError("Product", product_id)

    existing = await db.execute(
        select(ProductPrice)
        .where(ProductPrice.product_id == product_id)
        .where(ProductPrice.billing_cycle == billing_cycle)
    )
    if existing.scalar_one_or_none() is not None:
        raise DuplicateResourceError(
            f"Product {product.code} already has a {billing_cycle} price"
        )

    product_price = ProductPrice(
        product_id=product_id,
        billing_cycle=billing_cycle,
        price=price,
        term_months=term_months,
    )
    db.add(product_price)
    await db.flush()
    return product_price


async def list_products(db: AsyncSession, active_only: bool = True) -> list[Product]:
    """List products (with their prices), alphabetically."""
    query = select(Product).order_by(Product.name)
    if active_only:
        query = query.where(Product.is_active.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_active_price(db: AsyncSession, product_price_id: uuid.UUID) -> ProductPrice:
    """
    Resolve a price that can still be offered or subscribed to.

    Both the price and the product it belongs to must be active.

    Raises:
        ResourceNotFoundError: If the price doesn't exist or either is inactive.
    """
    product_price = await db.get(ProductPrice, product_price_id)
    if (
        product_price is None
        or product_price.status != "active"
        or not product_price.product.is_active
    ):
        raise ResourceNotFoundError("Product price", product_price_id)
    return product_price
