"""Product API endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from dealdesk.db import get_db
from dealdesk.models import ActivityType, Deal, Product, Schedule
from dealdesk.schemas import (
    ProductCreateRequest,
    ProductResponse,
    ProductUpdateRequest,
    ScheduleResponse,
    envelope,
)
from dealdesk.utils.activity import log_activity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])


async def _load_product(db: AsyncSession, product_id: int) -> Product:
    result = await db.execute(
        select(Product)
        .options(selectinload(Product.schedules).selectinload(Schedule.splits))
        .where(Product.id == product_id)
        .execution_options(populate_existing=True)
    )
    product = result.scalar_one_or_none()
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found",
        )
    return product


@router.get("")
async def list_products(
    db: AsyncSession = Depends(get_db),
    deal_id: Optional[int] = Query(None, alias="dealId"),
    product_code: Optional[str] = Query(None, alias="productCode"),
    product_name: Optional[str] = Query(None, alias="productName"),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    """List products with filters."""
    query = select(Product).options(selectinload(Product.schedules).selectinload(Schedule.splits))

    if deal_id is not None:
        query = query.where(Product.deal_id == deal_id)
    if product_code:
        query = query.where(Product.product_code == product_code)
    if product_name:
        query = query.where(Product.name.ilike(f"%{product_name.strip()}%"))
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(
            or_(
                Product.name.ilike(pattern),
                Product.product_code.ilike(pattern),
                Product.description.ilike(pattern),
            )
        )

    total = await db.scalar(select(func.count()).select_from(query.subquery())) or 0

    query = query.order_by(Product.id)
    products = (await db.execute(query.offset((page - 1) * limit).limit(limit))).scalars().all()

    return envelope(
        [ProductResponse.model_validate(p) for p in products],
        total=total,
        page=page,
        limit=limit,
        pages=(total + limit - 1) // limit if total else 0,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    data: ProductCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    if not await db.get(Deal, data.deal_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Deal not found",
        )

    product = Product(**data.model_dump())
    db.add(product)
    await db.flush()

    await log_activity(
        db=db,
        deal_id=product.deal_id,
        activity_type=ActivityType.PRODUCT_CREATED,
        entity_type="Product",
        entity_id=product.id,
        title=f"Product added: {product.name}",
        activity_metadata={"productCode": product.product_code},
    )
    await db.commit()
    logger.info("Product %s created on deal %s", product.id, product.deal_id)

    product = await _load_product(db, product.id)
    return envelope(ProductResponse.model_validate(product))


@router.get("/{product_id}")
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
):
    product = await _load_product(db, product_id)
    return envelope(ProductResponse.model_validate(product))


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    data: ProductUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Update product name, code, unit price, description or deliverables."""
    product = await _load_product(db, product_id)

    changed = []
    for field, value in data.model_dump(exclude_unset=True).items():
        if getattr(product, field) != value:
            setattr(product, field, value)
            changed.append(field)

    if changed:
        await log_activity(
            db=db,
            deal_id=product.deal_id,
            activity_type=ActivityType.PRODUCT_UPDATED,
            entity_type="Product",
            entity_id=product.id,
            title=f"Product updated: {product.name or product.id}",
            activity_metadata={"changedFields": changed},
        )
        await db.commit()
        logger.info("Product %s updated: %s", product_id, changed)

    product = await _load_product(db, product_id)
    return envelope(ProductResponse.model_validate(product))


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Delete a product with its schedules and splits, unless any schedule is paid."""
    product = await _load_product(db, product_id)

    paid = [s.id for s in product.schedules if s.is_paid]
    if paid:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Product has paid schedules ({', '.join(map(str, paid))}) and cannot be deleted",
        )

    await log_activity(
        db=db,
        deal_id=product.deal_id,
        activity_type=ActivityType.PRODUCT_DELETED,
        entity_type="Product",
        entity_id=product.id,
        title=f"Product deleted: {product.name or product.id}",
        activity_metadata={"scheduleCount": len(product.schedules)},
    )
    await db.delete(product)
    await db.commit()
    logger.info("Product %s deleted", product_id)
    return envelope({"id": product_id})


@router.get("/{product_id}/schedules")
async def list_product_schedules(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    """A product's schedules, oldest first, paginated."""
    if not await db.get(Product, product_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found",
        )

    query = select(Schedule).where(Schedule.product_id == product_id)
    total = await db.scalar(select(func.count()).select_from(query.subquery())) or 0
    result = await db.execute(
        query.options(selectinload(Schedule.splits))
        .order_by(Schedule.schedule_date, Schedule.id)
        .offset((page - 1) * limit)
        .limit(limit)
    )

    return envelope(
        [ScheduleResponse.model_validate(s) for s in result.scalars().all()],
        total=total,
        page=page,
        limit=limit,
        pages=(total + limit - 1) // limit if total else 0,
    )
