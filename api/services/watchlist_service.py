from __future__ import annotations

from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.services.form4_service import Form4Service
from logging_utils import get_logger
from models.watchlist import WatchlistItem
from utils.errors import NotFoundError
from utils.ticker_registry import normalize_ticker
from utils.time_utils import ensure_utc

logger = get_logger(__name__)


def serialize_item(item: WatchlistItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "ticker": item.ticker,
        "cik": item.cik,
        "added_at": ensure_utc(item.added_at).isoformat() if item.added_at else None,
    }


def _find(session: Session, ticker: str) -> WatchlistItem | None:
    return session.query(WatchlistItem).filter_by(ticker=ticker).first()


def list_items(session: Session) -> list[WatchlistItem]:
    return session.query(WatchlistItem).order_by(WatchlistItem.ticker.asc()).all()


def add_ticker(
    session: Session, service: Form4Service, ticker: str
) -> tuple[WatchlistItem, bool]:
    """Add a ticker after resolving it against the SEC directory.

    Returns (item, created). Adding an existing ticker returns the stored row.
    """

    entry = service.resolve_ticker(ticker)

    existing = _find(session, entry.ticker)
    if existing is not None:
        return existing, False

    item = WatchlistItem(ticker=entry.ticker, cik=entry.cik)
    session.add(item)
    try:
        session.commit()
    except IntegrityError:
        # A concurrent request inserted the same ticker first.
        session.rollback()
        existing = _find(session, entry.ticker)
        if existing is None:
            raise
        logger.info("Watchlist add raced | ticker=%s", entry.ticker)
        return existing, False
    session.refresh(item)
    logger.info("Watchlist add | ticker=%s cik=%s", item.ticker, item.cik)
    return item, True


def remove_ticker(session: Session, ticker: str) -> None:
    wanted = normalize_ticker(ticker)
    item = _find(session, wanted)
    if item is None:
        raise NotFoundError("Ticker not in watchlist", details={"ticker": wanted})

    session.delete(item)
    session.commit()
    logger.info("Watchlist remove | ticker=%s", wanted)
