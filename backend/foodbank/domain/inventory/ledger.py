"""Stock ledger calculations.

Inventory levels are never stored. An item's stock is the sum of its append-only
transaction log: donations add, distributions subtract. Everything here is pure
and operates on any object exposing ``transaction_type`` and ``quantity``
(ORM rows, schema objects or :class:`LedgerEntry`).
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Protocol, Sequence


class TransactionType(str, Enum):
    DONATION_IN = "donation_in"
    DISTRIBUTION_OUT = "distribution_out"


# Older clients post the outbound type without the direction suffix.
TRANSACTION_TYPE_ALIASES: dict[str, TransactionType] = {
    "distribution": TransactionType.DISTRIBUTION_OUT,
}

_SIGNS: dict[str, int] = {
    TransactionType.DONATION_IN.value: 1,
    TransactionType.DISTRIBUTION_OUT.value: -1,
}


class LedgerTransaction(Protocol):
    transaction_type: str
    quantity: int


class StockedItem(Protocol):
    id: uuid.UUID
    name: str
    minimum_stock: int


@dataclass(frozen=True)
class LedgerEntry:
    transaction_type: str
    quantity: int


@dataclass(frozen=True)
class LowStockStatus:
    is_low: bool
    shortage: int


@dataclass(frozen=True)
class LowStockAlert:
    item: Any
    current_stock: int
    shortage: int


def normalize_transaction_type(raw: str) -> str:
    """Return the canonical transaction type for ``raw``.

    Known aliases map to their canonical value. Unrecognised values come back
    stripped and lower-cased but otherwise untouched; they contribute nothing
    to stock.
    """
    value = raw.strip().lower()
    alias = TRANSACTION_TYPE_ALIASES.get(value)
    if alias is not None:
        return alias.value
    return value


def is_known_transaction_type(value: str) -> bool:
    return normalize_transaction_type(value) in _SIGNS


def stock_delta(transaction: LedgerTransaction) -> int:
    raw_type = transaction.transaction_type
    type_value = raw_type.value if isinstance(raw_type, Enum) else str(raw_type)
    sign = _SIGNS.get(normalize_transaction_type(type_value), 0)
    return sign * int(transaction.quantity)


def compute_current_stock(transactions: Iterable[LedgerTransaction]) -> int:
    """Sum a transaction log into a stock level.

    The result is not clamped: a ledger with more distributed than donated
    yields a negative number, which callers surface as an anomaly.
    """
    total = 0
    for transaction in transactions:
        total += stock_delta(transaction)
    return total


def evaluate_low_stock(minimum_stock: int, current_stock: int) -> LowStockStatus:
    """Classify a stock level against its threshold.

    An item is low only when strictly below ``minimum_stock``; sitting exactly
    at the minimum is not low, so every low item has a positive shortage.
    """
    if current_stock < minimum_stock:
        return LowStockStatus(is_low=True, shortage=minimum_stock - current_stock)
    return LowStockStatus(is_low=False, shortage=0)


def group_by_item(
    transactions: Iterable[Any],
) -> dict[uuid.UUID, list[Any]]:
    grouped: dict[uuid.UUID, list[Any]] = defaultdict(list)
    for transaction in transactions:
        grouped[transaction.item_id].append(transaction)
    return dict(grouped)


def build_low_stock_alerts(
    items: Iterable[StockedItem],
    transactions_by_item: Mapping[uuid.UUID, Sequence[LedgerTransaction]],
) -> list[LowStockAlert]:
    """Return the items whose derived stock is below their minimum.

    Alerts are ordered by descending shortage, then by item name.
    """
    alerts: list[LowStockAlert] = []
    for item in items:
        current_stock = compute_current_stock(transactions_by_item.get(item.id, ()))
        status = evaluate_low_stock(item.minimum_stock, current_stock)
        if status.shortage <= 0:
            continue
        alerts.append(LowStockAlert(item=item, current_stock=current_stock, shortage=status.shortage))
    alerts.sort(key=lambda alert: (-alert.shortage, alert.item.name))
    return alerts
