from __future__ import annotations

import pytest

from utils.ownership_xml import Transaction
from utils.transaction_summary import classify, is_buy, is_sell


def _t(code=None, ad=None) -> Transaction:
    return Transaction(transaction_code=code, acquired_disposed=ad)


@pytest.mark.parametrize(
    "code,ad,buy,sell",
    [
        ("P", None, True, False),
        (None, "A", True, False),
        ("S", None, False, True),
        (None, "D", False, True),
        ("M", "A", True, False),
        ("G", "D", False, True),
        ("S", "A", True, True),
        ("J", None, False, False),
        (None, None, False, False),
    ],
)
def test_buy_sell_tests_are_independent(code, ad, buy, sell):
    t = _t(code, ad)
    assert is_buy(t) is buy
    assert is_sell(t) is sell


def test_classify_counts():
    txns = [_t("P", "A"), _t("S", "D"), _t("S", "A"), _t("J")]

    buys, sells, summary = classify(txns)

    assert len(buys) == 2
    assert len(sells) == 2
    assert summary.count == 4
    assert summary.buy_count == 2
    assert summary.sell_count == 2
    assert summary.to_dict() == {"count": 4, "buys": 2, "sells": 2}


def test_classify_preserves_order_and_accepts_iterables():
    a, b, c = _t("P"), _t("M", "A"), _t("S")
    buys, sells, summary = classify(iter([a, b, c]))

    assert buys == [a, b]
    assert sells == [c]
    assert summary.count == 3


def test_classify_empty():
    buys, sells, summary = classify([])
    assert buys == [] and sells == []
    assert summary.to_dict() == {"count": 0, "buys": 0, "sells": 0}
