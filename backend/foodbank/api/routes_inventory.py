"""API endpoints for inventory: categories, items, the transaction ledger and low-stock alerts."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from foodbank.api.auth import Principal, require_principal
from foodbank.domain.errors import store_errors
from foodbank.domain.inventory import schemas, service
from foodbank.infra.db import get_db_session

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


def _item_with_stock(entry: service.ItemStock) -> schemas.InventoryItemWithStockResponse:
    base = schemas.InventoryItemResponse.model_validate(entry.item)
    return schemas.InventoryItemWithStockResponse(
        **base.model_dump(),
        current_stock=entry.current_stock,
        is_low_stock=entry.is_low_stock,
    )


def _category_ref(item) -> schemas.InventoryCategoryRef | None:
    if item.category is None:
        return None
    return schemas.InventoryCategoryRef.model_validate(item.category)


def _item_not_found(item_id: uuid.UUID) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Item {item_id} not found",
    )


# ===== Item Listing =====


@router.get(
    "",
    response_model=list[schemas.InventoryItemWithStockResponse],
    status_code=status.HTTP_200_OK,
)
async def list_inventory_items(
    category_id: uuid.UUID | None = None,
    low_stock: bool = False,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> list[schemas.InventoryItemWithStockResponse]:
    """
    List inventory items with stock derived from the transaction ledger.

    Query parameters:
    - category_id: Filter by category (optional)
    - low_stock: Only items strictly below their minimum stock (optional)
    """
    with store_errors("Failed to fetch inventory"):
        entries = await service.list_items(
            session,
            principal.organization_id,
            category_id=category_id,
            low_stock=low_stock,
        )
    return [_item_with_stock(entry) for entry in entries]


# ===== Category Endpoints =====


@router.get(
    "/categories",
    response_model=list[schemas.InventoryCategoryResponse],
    status_code=status.HTTP_200_OK,
)
async def list_inventory_categories(
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> list[schemas.InventoryCategoryResponse]:
    """List inventory categories ordered by name."""
    with store_errors("Failed to fetch categories", status_code=status.HTTP_400_BAD_REQUEST):
        categories = await service.list_categories(session, principal.organization_id)
    return [schemas.InventoryCategoryResponse.model_validate(c) for c in categories]


@router.post(
    "/categories",
    response_model=schemas.InventoryCategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_inventory_category(
    data: schemas.InventoryCategoryCreate,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> schemas.InventoryCategoryResponse:
    with store_errors("Failed to create category", status_code=status.HTTP_400_BAD_REQUEST):
        category = await service.create_category(session, principal.organization_id, data)
        await session.commit()
    return schemas.InventoryCategoryResponse.model_validate(category)


# ===== Low Stock =====


@router.get(
    "/alerts/low-stock",
    response_model=list[schemas.InventoryLowStockItemResponse],
    status_code=status.HTTP_200_OK,
)
async def list_low_stock_alerts(
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> list[schemas.InventoryLowStockItemResponse]:
    """
    Items whose derived stock is strictly below their minimum.

    Sorted by largest shortage first.
    """
    with store_errors("Failed to fetch low stock alerts", status_code=status.HTTP_400_BAD_REQUEST):
        alerts = await service.list_low_stock_alerts(session, principal.organization_id)
    return [
        schemas.InventoryLowStockItemResponse(
            id=alert.item.id,
            name=alert.item.name,
            unit_type=alert.item.unit_type,
            category_id=alert.item.category_id,
            category=_category_ref(alert.item),
            category_name=alert.item.category_name,
            minimum_stock=alert.item.minimum_stock,
            current_stock=alert.current_stock,
            shortage=alert.shortage,
        )
        for alert in alerts
    ]


# ===== Transactions =====


@router.post(
    "/transaction",
    response_model=schemas.InventoryTransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_inventory_transaction(
    data: schemas.InventoryTransactionCreate,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> schemas.InventoryTransactionResponse:
    """
    Append a ledger entry for an item in the caller's organization.

    The entry is immutable once written; corrections are new entries.
    """
    with store_errors("Failed to record transaction", status_code=status.HTTP_400_BAD_REQUEST):
        transaction = await service.record_transaction(
            session,
            principal.organization_id,
            principal.user_id,
            data,
        )
        if transaction is None:
            raise _item_not_found(data.item_id)
        await session.commit()
    return schemas.InventoryTransactionResponse.model_validate(transaction)


# ===== Item Endpoints =====


@router.get(
    "/{item_id}",
    response_model=schemas.InventoryItemDetailResponse,
    status_code=status.HTTP_200_OK,
)
async def get_inventory_item(
    item_id: uuid.UUID,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> schemas.InventoryItemDetailResponse:
    """Item with stock computed from its full history and its most recent transactions."""
    detail = await service.get_item_detail(session, principal.organization_id, item_id)
    if detail is None:
        raise _item_not_found(item_id)

    base = _item_with_stock(detail)
    return schemas.InventoryItemDetailResponse(
        **base.model_dump(),
        recent_transactions=[
            schemas.InventoryTransactionResponse.model_validate(t) for t in detail.recent_transactions
        ],
    )


@router.post(
    "",
    response_model=schemas.InventoryItemResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_inventory_item(
    data: schemas.InventoryItemCreate,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> schemas.InventoryItemResponse:
    """Create a new inventory item. Its stock starts at zero."""
    with store_errors("Failed to create item", status_code=status.HTTP_400_BAD_REQUEST):
        item = await service.create_item(session, principal.organization_id, data)
        await session.commit()
        item = await service.get_item(session, principal.organization_id, item.id)
    return schemas.InventoryItemResponse.model_validate(item)


@router.put(
    "/{item_id}",
    response_model=schemas.InventoryItemResponse,
    status_code=status.HTTP_200_OK,
)
async def update_inventory_item(
    item_id: uuid.UUID,
    data: schemas.InventoryItemUpdate,
    principal: Principal = Depends(require_principal),
    session: AsyncSession = Depends(get_db_session),
) -> schemas.InventoryItemResponse:
    with store_errors("Failed to update item", status_code=status.HTTP_400_BAD_REQUEST):
        item = await service.update_item(session, principal.organization_id, item_id, data)
        if item is None:
            raise _item_not_found(item_id)
        await session.commit()
        item = await service.get_item(session, principal.organization_id, item_id)
    return schemas.InventoryItemResponse.model_validate(item)
