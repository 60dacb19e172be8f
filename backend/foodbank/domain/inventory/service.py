"""Inventory domain service layer.

Stock is never read from a column: every function that reports a level loads
the item's transactions and runs them through :mod:`ledger`.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from foodbank.domain.errors import ValidationError
from foodbank.domain.inventory import db_models, ledger, schemas
from foodbank.infra.metrics import metrics
from foodbank.settings import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemStock:
    item: db_models.InventoryItem
    current_stock: int
    is_low_stock: bool


@dataclass(frozen=True)
class ItemDetail(ItemStock):
    recent_transactions: list[db_models.InventoryTransaction]


def _normalize_notes(notes: str | None) -> str | None:
    if notes is None:
        return None
    trimmed = notes.strip()
    return trimmed or None


def _item_stock(
    item: db_models.InventoryItem,
    transactions: list,
) -> ItemStock:
    current_stock = ledger.compute_current_stock(transactions)
    if current_stock < 0:
        logger.warning(
            "inventory_negative_stock",
            extra={
                "extra": {
                    "org_id": str(item.organization_id),
                    "item_id": str(item.id),
                    "current_stock": current_stock,
                }
            },
        )
    status = ledger.evaluate_low_stock(item.minimum_stock, current_stock)
    return ItemStock(item=item, current_stock=current_stock, is_low_stock=status.is_low)


async def _org_transactions_by_item(
    session: AsyncSession,
    org_id: uuid.UUID,
) -> dict[uuid.UUID, list]:
    stmt = select(
        db_models.InventoryTransaction.item_id,
        db_models.InventoryTransaction.transaction_type,
        db_models.InventoryTransaction.quantity,
    ).where(db_models.InventoryTransaction.organization_id == org_id)
    result = await session.execute(stmt)
    return ledger.group_by_item(result.all())


# ===== Category Service Functions =====


async def list_categories(
    session: AsyncSession,
    org_id: uuid.UUID,
) -> list[db_models.InventoryCategory]:
    stmt = (
        select(db_models.InventoryCategory)
        .where(db_models.InventoryCategory.organization_id == org_id)
        .order_by(db_models.InventoryCategory.name.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_category(
    session: AsyncSession,
    org_id: uuid.UUID,
    category_id: uuid.UUID,
) -> db_models.InventoryCategory | None:
    """Get a single inventory category by ID."""
    stmt = select(db_models.InventoryCategory).where(
        db_models.InventoryCategory.organization_id == org_id,
        db_models.InventoryCategory.id == category_id,
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_category(
    session: AsyncSession,
    org_id: uuid.UUID,
    data: schemas.InventoryCategoryCreate,
) -> db_models.InventoryCategory:
    """Create a new inventory category."""
    category = db_models.InventoryCategory(
        id=uuid.uuid4(),
        organization_id=org_id,
        name=data.name.strip(),
        created_at=datetime.now(timezone.utc),
    )
    session.add(category)
    await session.flush()
    return category


# ===== Item Service Functions =====


async def list_items(
    session: AsyncSession,
    org_id: uuid.UUID,
    *,
    category_id: uuid.UUID | None = None,
    low_stock: bool = False,
) -> list[ItemStock]:
    """
    List inventory items with their derived stock levels.

    Args:
        session: Database session
        org_id: Organization ID for scoping
        category_id: Only return items in this category
        low_stock: Only return items strictly below their minimum stock

    Returns:
        Items ordered by name, each paired with its current stock
    """
    stmt = (
        select(db_models.InventoryItem)
        .options(selectinload(db_models.InventoryItem.category))
        .where(db_models.InventoryItem.organization_id == org_id)
        .order_by(db_models.InventoryItem.name.asc())
        .execution_options(populate_existing=True)
    )
    if category_id is not None:
        stmt = stmt.where(db_models.InventoryItem.category_id == category_id)

    result = await session.execute(stmt)
    items = list(result.scalars().all())
    transactions_by_item = await _org_transactions_by_item(session, org_id)

    stocked = [_item_stock(item, transactions_by_item.get(item.id, [])) for item in items]
    if low_stock:
        stocked = [entry for entry in stocked if entry.is_low_stock]
    return stocked


async def get_item(
    session: AsyncSession,
    org_id: uuid.UUID,
    item_id: uuid.UUID,
) -> db_models.InventoryItem | None:
    """Get a single inventory item by ID, with its category loaded."""
    stmt = (
        select(db_models.InventoryItem)
        .options(selectinload(db_models.InventoryItem.category))
        .where(
            db_models.InventoryItem.organization_id == org_id,
            db_models.InventoryItem.id == item_id,
        )
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_item_detail(
    session: AsyncSession,
    org_id: uuid.UUID,
    item_id: uuid.UUID,
    *,
    recent_limit: int | None = None,
) -> ItemDetail | None:
    """
    Get an item with stock computed from its full history.

    ``recent_transactions`` is only a display window; it never feeds the
    stock calculation.
    """
    item = await get_item(session, org_id, item_id)
    if item is None:
        return None

    history_stmt = select(
        db_models.InventoryTransaction.transaction_type,
        db_models.InventoryTransaction.quantity,
    ).where(
        db_models.InventoryTransaction.organization_id == org_id,
        db_models.InventoryTransaction.item_id == item_id,
    )
    history = (await session.execute(history_stmt)).all()
    stock = _item_stock(item, history)

    limit = settings.recent_transactions_limit if recent_limit is None else recent_limit
    recent_stmt = (
        select(db_models.InventoryTransaction)
        .where(
            db_models.InventoryTransaction.organization_id == org_id,
            db_models.InventoryTransaction.item_id == item_id,
        )
        .order_by(db_models.InventoryTransaction.transaction_date.desc())
        .limit(limit)
    )
    recent = list((await session.execute(recent_stmt)).scalars().all())

    return ItemDetail(
        item=stock.item,
        current_stock=stock.current_stock,
        is_low_stock=stock.is_low_stock,
        recent_transactions=recent,
    )


async def _ensure_category(
    session: AsyncSession,
    org_id: uuid.UUID,
    category_id: uuid.UUID,
) -> None:
    category = await get_category(session, org_id, category_id)
    if category is None:
        raise ValidationError(detail=f"Category {category_id} not found")


async def create_item(
    session: AsyncSession,
    org_id: uuid.UUID,
    data: schemas.InventoryItemCreate,
) -> db_models.InventoryItem:
    """Create a new inventory item. The category must belong to the same org."""
    if data.category_id is not None:
        await _ensure_category(session, org_id, data.category_id)

    now = datetime.now(timezone.utc)
    item = db_models.InventoryItem(
        id=uuid.uuid4(),
        organization_id=org_id,
        category_id=data.category_id,
        name=data.name.strip(),
        description=data.description,
        sku=data.sku,
        barcode=data.barcode,
        unit_type=data.unit_type,
        minimum_stock=data.minimum_stock,
        notes=_normalize_notes(data.notes),
        created_at=now,
        updated_at=now,
    )
    session.add(item)
    await session.flush()
    return item


async def update_item(
    session: AsyncSession,
    org_id: uuid.UUID,
    item_id: uuid.UUID,
    data: schemas.InventoryItemUpdate,
) -> db_models.InventoryItem | None:
    """Update an existing inventory item."""
    item = await get_item(session, org_id, item_id)
    if item is None:
        return None

    updates = data.model_dump(exclude_unset=True)
    if updates.get("category_id") is not None:
        await _ensure_category(session, org_id, updates["category_id"])
    if "notes" in updates:
        updates["notes"] = _normalize_notes(updates["notes"])
    if updates.get("name") is not None:
        updates["name"] = updates["name"].strip()

    for field, value in updates.items():
        if value is None and field in {"name", "unit_type", "minimum_stock"}:
            continue
        setattr(item, field, value)
    item.updated_at = datetime.now(timezone.utc)

    await session.flush()
    return item


# ===== Transaction Service Functions =====


async def record_transaction(
    session: AsyncSession,
    org_id: uuid.UUID,
    user_id: uuid.UUID | None,
    data: schemas.InventoryTransactionCreate,
) -> db_models.InventoryTransaction | None:
    """
    Append a ledger entry for an item.

    Returns None when the item does not exist in the caller's organization.
    Unrecognised transaction types are stored verbatim and logged; they
    contribute nothing to stock.
    """
    item = await get_item(session, org_id, data.item_id)
    if item is None:
        return None

    transaction_type = ledger.normalize_transaction_type(data.transaction_type)
    if not ledger.is_known_transaction_type(transaction_type):
        logger.warning(
            "inventory_transaction_unknown_type",
            extra={
                "extra": {
                    "org_id": str(org_id),
                    "item_id": str(item.id),
                    "transaction_type": transaction_type,
                }
            },
        )

    transaction = db_models.InventoryTransaction(
        id=uuid.uuid4(),
        organization_id=org_id,
        item_id=item.id,
        transaction_type=transaction_type,
        quantity=data.quantity,
        notes=_normalize_notes(data.notes),
        user_id=user_id,
        transaction_date=data.transaction_date or datetime.now(timezone.utc),
    )
    session.add(transaction)
    await session.flush()

    metrics.record_inventory_transaction(transaction_type)
    logger.info(
        "inventory_transaction_recorded",
        extra={
            "extra": {
                "org_id": str(org_id),
                "item_id": str(item.id),
                "transaction_id": str(transaction.id),
                "transaction_type": transaction_type,
                "quantity": data.quantity,
            }
        },
    )
    return transaction


# ===== Low Stock Service Functions =====


async def list_low_stock_alerts(
    session: AsyncSession,
    org_id: uuid.UUID,
) -> list[ledger.LowStockAlert]:
    """Return the org's items whose derived stock is below their minimum."""
    stmt = (
        select(db_models.InventoryItem)
        .options(selectinload(db_models.InventoryItem.category))
        .where(db_models.InventoryItem.organization_id == org_id)
        .execution_options(populate_existing=True)
    )
    items = list((await session.execute(stmt)).scalars().all())
    transactions_by_item = await _org_transactions_by_item(session, org_id)

    alerts = ledger.build_low_stock_alerts(items, transactions_by_item)
    for alert in alerts:
        if alert.current_stock < 0:
            logger.warning(
                "inventory_negative_stock",
                extra={
                    "extra": {
                        "org_id": str(org_id),
                        "item_id": str(alert.item.id),
                        "current_stock": alert.current_stock,
                    }
                },
            )
    metrics.record_low_stock_alerts(str(org_id), len(alerts))
    return alerts
