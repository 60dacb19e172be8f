"""Stock ledger calculations: derived stock, low-stock classification and alert building."""
import itertools
import uuid
from dataclasses import dataclass

from foodbank.domain.inventory.ledger import (
    LedgerEntry,
    TransactionType,
    build_low_stock_alerts,
    compute_current_stock,
    evaluate_low_stock,
    group_by_item,
    is_known_transaction_type,
    normalize_transaction_type,
    stock_delta,
)


@dataclass
class _Item:
    id: uuid.UUID
    name: str
    minimum_stock: int


@dataclass
class _Txn:
    item_id: uuid.UUID
    transaction_type: str
    quantity: int


def _in(quantity: int) -> LedgerEntry:
    return LedgerEntry(TransactionType.DONATION_IN.value, quantity)


def _out(quantity: int) -> LedgerEntry:
    return LedgerEntry(TransactionType.DISTRIBUTION_OUT.value, quantity)


def test_empty_ledger_has_zero_stock():
    assert compute_current_stock([]) == 0


def test_donations_add_and_distributions_subtract():
    assert compute_current_stock([_in(150), _out(30)]) == 120


def test_stock_is_order_independent():
    entries = [_in(40), _out(15), _in(10), _out(5), LedgerEntry("recount", 3)]
    for ordering in itertools.permutations(entries):
        assert compute_current_stock(list(ordering)) == 30


def test_stock_is_not_clamped_at_zero():
    assert compute_current_stock([_in(10), _out(25)]) == -15


def test_unknown_type_contributes_nothing():
    entries = [_in(50), LedgerEntry("adjustment", 20), LedgerEntry("recount", 7)]
    assert compute_current_stock(entries) == 50


def test_distribution_alias_counts_as_outbound():
    assert compute_current_stock([_in(20), LedgerEntry("distribution", 5)]) == 15
    assert stock_delta(LedgerEntry(" Distribution_Out ", 3)) == -3


def test_stock_delta_accepts_enum_members():
    assert stock_delta(LedgerEntry(TransactionType.DONATION_IN, 4)) == 4
    assert stock_delta(LedgerEntry(TransactionType.DISTRIBUTION_OUT, 4)) == -4


def test_normalize_transaction_type():
    assert normalize_transaction_type("distribution") == "distribution_out"
    assert normalize_transaction_type("  DONATION_IN ") == "donation_in"
    assert normalize_transaction_type("Spoilage") == "spoilage"
    assert is_known_transaction_type("distribution")
    assert not is_known_transaction_type("spoilage")


def test_low_stock_below_minimum():
    status = evaluate_low_stock(minimum_stock=150, current_stock=120)
    assert status.is_low is True
    assert status.shortage == 30


def test_stock_above_minimum_is_not_low():
    status = evaluate_low_stock(minimum_stock=100, current_stock=120)
    assert status.is_low is False
    assert status.shortage == 0


def test_stock_equal_to_minimum_is_not_low():
    status = evaluate_low_stock(minimum_stock=100, current_stock=100)
    assert status.is_low is False
    assert status.shortage == 0


def test_negative_stock_is_low_with_full_shortage():
    status = evaluate_low_stock(minimum_stock=10, current_stock=-5)
    assert status.is_low is True
    assert status.shortage == 15


def test_zero_minimum_never_low_for_non_negative_stock():
    assert evaluate_low_stock(minimum_stock=0, current_stock=0).is_low is False


def test_group_by_item():
    a, b = uuid.uuid4(), uuid.uuid4()
    grouped = group_by_item([_Txn(a, "donation_in", 1), _Txn(b, "donation_in", 2), _Txn(a, "donation_in", 3)])
    assert [t.quantity for t in grouped[a]] == [1, 3]
    assert [t.quantity for t in grouped[b]] == [2]


def test_alerts_only_include_items_below_minimum():
    item_a = _Item(uuid.uuid4(), "Rice", 100)
    item_b = _Item(uuid.uuid4(), "Beans", 10)
    transactions = [
        _Txn(item_a.id, "donation_in", 80),
        _Txn(item_a.id, "distribution_out", 30),
        _Txn(item_b.id, "donation_in", 20),
    ]

    alerts = build_low_stock_alerts([item_a, item_b], group_by_item(transactions))

    assert len(alerts) == 1
    assert alerts[0].item is item_a
    assert alerts[0].current_stock == 50
    assert alerts[0].shortage == 50


def test_alerts_treat_missing_transactions_as_zero_stock():
    item = _Item(uuid.uuid4(), "Pasta", 5)
    alerts = build_low_stock_alerts([item], {})
    assert [(a.current_stock, a.shortage) for a in alerts] == [(0, 5)]


def test_alerts_skip_item_exactly_at_minimum():
    item = _Item(uuid.uuid4(), "Flour", 20)
    alerts = build_low_stock_alerts([item], {item.id: [_in(20)]})
    assert alerts == []


def test_alerts_sorted_by_shortage_then_name():
    soup = _Item(uuid.uuid4(), "Soup", 10)
    apples = _Item(uuid.uuid4(), "Apples", 10)
    milk = _Item(uuid.uuid4(), "Milk", 40)

    alerts = build_low_stock_alerts([soup, apples, milk], {milk.id: [_in(5)]})

    assert [a.item.name for a in alerts] == ["Milk", "Apples", "Soup"]
    assert [a.shortage for a in alerts] == [35, 10, 10]
