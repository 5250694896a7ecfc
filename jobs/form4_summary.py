from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Allow running this file directly (e.g. `python jobs/form4_summary.py`) by
# ensuring the project root is importable.
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from api.services.form4_service import Form4Service, build_form4_service
from logging_utils import get_logger
from settings import SETTINGS
from utils.errors import FilingsError
from utils.ownership_xml import Transaction
from utils.transaction_summary import classify

logger = get_logger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Print buy/sell summaries of a ticker's recent Form 4 filings"
    )
    p.add_argument("--ticker", required=True, help="Ticker symbol, e.g. AAPL")
    p.add_argument(
        "--limit", type=int, default=5, help="Max filings to summarize (default: 5)"
    )
    return p.parse_args(argv)


def _fmt_money(value: float | None) -> str:
    return "-" if value is None else f"${value:,.2f}"


def _total(txns: list[Transaction]) -> float | None:
    """Sum of known total values; None when no transaction has one."""

    values = [t.total_value for t in txns if t.total_value is not None]
    return sum(values) if values else None


def summarize_recent(service: Form4Service, ticker: str, limit: int) -> list[str]:
    """One line per filing: date, accession, owner(s), counts, buy/sell value."""

    listing = service.list_recent_filings(ticker)
    lines = [f"{listing['ticker']} (CIK {listing['cik']})"]

    for filing in listing["filings"][: max(0, limit)]:
        details = service.get_details(listing["cik"], filing["accession_number"])
        owners = ", ".join(
            o["name"] or "?" for o in details["reporting_owners"]
        ) or "?"
        buys, sells, summary = classify(
            Transaction(**t) for t in details["transactions"]
        )
        lines.append(
            f"  {filing['filing_date']} {filing['form_type']:<4} {filing['accession_number']} "
            f"{owners} | txns={summary.count} buys={summary.buy_count} "
            f"sells={summary.sell_count} bought={_fmt_money(_total(buys))} "
            f"sold={_fmt_money(_total(sells))}"
        )
    return lines


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    service = build_form4_service(SETTINGS)

    try:
        lines = summarize_recent(service, args.ticker, int(args.limit))
    except FilingsError as e:
        logger.error(
            "form4_summary failed | ticker=%s code=%s err=%s", args.ticker, e.code, e
        )
        return 1

    for line in lines:
        print(line)
    logger.info(
        "form4_summary complete | ticker=%s filings=%s", args.ticker, len(lines) - 1
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
