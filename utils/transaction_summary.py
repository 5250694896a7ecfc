from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from utils.ownership_xml import Transaction

BUY_TRANSACTION_CODE = "P"  # open-market purchase
SELL_TRANSACTION_CODE = "S"  # open-market sale
ACQUIRED = "A"
DISPOSED = "D"


@dataclass(frozen=True)
class TransactionSummary:
    count: int
    buy_count: int
    sell_count: int

    def to_dict(self) -> dict[str, int]:
        return {"count": self.count, "buys": self.buy_count, "sells": self.sell_count}


def is_buy(t: Transaction) -> bool:
    return t.transaction_code == BUY_TRANSACTION_CODE or t.acquired_disposed == ACQUIRED


def is_sell(t: Transaction) -> bool:
    return (
        t.transaction_code == SELL_TRANSACTION_CODE or t.acquired_disposed == DISPOSED
    )


def classify(
    transactions: Iterable[Transaction],
) -> tuple[list[Transaction], list[Transaction], TransactionSummary]:
    """Split transactions into buys and sells.

    The two tests are independent: a transaction coded "S" but marked acquired
    ("A") lands in both lists, so buys + sells may exceed count.
    """

    txns = list(transactions)
    buys = [t for t in txns if is_buy(t)]
    sells = [t for t in txns if is_sell(t)]
    return buys, sells, TransactionSummary(
        count=len(txns), buy_count=len(buys), sell_count=len(sells)
    )
