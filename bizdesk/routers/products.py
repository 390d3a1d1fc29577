"""
Products router — the catalogue of things that can be offered.

Endpoints:
  POST /products               — [Manager] Create a product
  POST /products/{id}/prices   — [Manager] Add a price for a billing cycle
  GET  /products               — List active products with their prices
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.database import get_db
from bizdesk.dependencies import get_current_user, require_manager
from bizdesk.models.user import User
from bizdesk.schemas.product import (
    ProductCreateRequest,
    ProductPriceCreateRequest,
    ProductPriceResponse,
    ProductResponse,
)
from bizdesk.services import product_service

router = APIRouter()


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
)
async def create_product(
    request: ProductCreateRequest,
    manager: User = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    return await product_service.create_product(
        db=db,
        name=request.name,
        code=request.code,
        description=request.description,
    )


@router.post(
    "/{product_id}/prices",
    response_model=ProductPriceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a price to a product",
)
async def add_price(
    product_id: uuid.UUID,
    request: ProductPriceCreateRequest,
    manager: User = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """
    Attach a price for one billing cycle.

    **term_months** is the length of a subscription bought at this price;
    accepting an offer ends the subscription that many months after today.
    """
    return await product_service.add_price(
        db=db,
        product_id=product_id,
        billing_cycle=request.billing_cycle.value,
        price=request.price,
        term_months=request.term_months,
    )


@router.get(
    "",
    response_model=list[ProductResponse],
    summary="List products",
)
async def list_products(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await product_service.list_products(db)
