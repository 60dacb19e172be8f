"""Inventory domain schemas (Pydantic models for API request/response)."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from foodbank.domain.inventory.ledger import normalize_transaction_type


# ===== Category Schemas =====


class InventoryCategoryResponse(BaseModel):
    """Response model for inventory category."""

    id: UUID
    organization_id: UUID
    name: str
    created_at: datetime

    class Config:
        from_attributes = True


class InventoryCategoryRef(BaseModel):
    """Nested category reference embedded in item payloads."""

    id: UUID
    name: str

    class Config:
        from_attributes = True


class InventoryCategoryCreate(BaseModel):
    """Request model for creating an inventory category."""

    name: str = Field(..., min_length=1, max_length=255)


# ===== Item Schemas =====


class InventoryItemResponse(BaseModel):
    """Response model for inventory item."""

    id: UUID
    organization_id: UUID
    category_id: UUID | None
    name: str
    description: str | None
    sku: str | None
    barcode: str | None
    unit_type: str
    minimum_stock: int
    notes: str | None
    created_at: datetime
    updated_at: datetime
    category: InventoryCategoryRef | None = None
    category_name: str | None = None

    class Config:
        from_attributes = True


class InventoryItemWithStockResponse(InventoryItemResponse):
    """Item with its stock level derived from the transaction ledger."""

    current_stock: int
    is_low_stock: bool


class InventoryItemCreate(BaseModel):
    """Request model for creating an inventory item."""

    name: str = Field(..., min_length=1, max_length=255)
    category_id: UUID | None = None
    description: str | None = None
    sku: str | None = Field(None, max_length=100)
    barcode: str | None = Field(None, max_length=100)
    unit_type: str = Field(..., min_length=1, max_length=50)
    minimum_stock: int = Field(default=0, ge=0)
    notes: str | None = None


class InventoryItemUpdate(BaseModel):
    """Request model for updating an inventory item."""

    name: str | None = Field(None, min_length=1, max_length=255)
    category_id: UUID | None = None
    description: str | None = None
    sku: str | None = Field(None, max_length=100)
    barcode: str | None = Field(None, max_length=100)
    unit_type: str | None = Field(None, min_length=1, max_length=50)
    minimum_stock: int | None = Field(None, ge=0)
    notes: str | None = None


# ===== Transaction Schemas =====


class InventoryTransactionCreate(BaseModel):
    """Request model for appending a ledger entry.

    ``distribution`` is accepted as an alias of ``distribution_out``. Other
    unrecognised types are stored as sent and do not move stock.
    """

    item_id: UUID
    transaction_type: str = Field(..., min_length=1, max_length=32)
    quantity: int = Field(..., gt=0)
    notes: str | None = None
    transaction_date: datetime | None = None

    @field_validator("transaction_type")
    @classmethod
    def normalize_type(cls, value: str) -> str:
        normalized = normalize_transaction_type(value)
        if not normalized:
            raise ValueError("transaction_type must not be blank")
        return normalized


class InventoryTransactionResponse(BaseModel):
    """Response model for a ledger entry."""

    id: UUID
    organization_id: UUID
    item_id: UUID
    transaction_type: str
    quantity: int
    notes: str | None
    user_id: UUID | None
    transaction_date: datetime

    class Config:
        from_attributes = True


class InventoryItemDetailResponse(InventoryItemWithStockResponse):
    """Item with derived stock and its most recent ledger entries."""

    recent_transactions: list[InventoryTransactionResponse]


# ===== Low Stock Schemas =====


class InventoryLowStockItemResponse(BaseModel):
    """Response model for a low stock alert."""

    id: UUID
    name: str
    unit_type: str
    category_id: UUID | None
    category: InventoryCategoryRef | None = None
    category_name: str | None = None
    minimum_stock: int
    current_stock: int
    shortage: int
