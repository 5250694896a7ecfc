"""Ticker -> CIK registry with a freshness window.

The SEC publishes the full ticker directory as one JSON document
(`company_tickers.json`). It is fetched lazily, kept in memory as an immutable
snapshot, and replaced wholesale once older than the configured TTL.

Readers grab the current snapshot reference once and work on it; a refresh
builds a new snapshot and swaps the reference, so a lookup never sees a mix of
old and new entries.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from logging_utils import get_logger
from utils.errors import NotFoundError, ValidationError
from utils.sec_edgar_api import fetch_company_tickers, pad_cik
from utils.time_utils import utcnow

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class RegistryEntry:
    ticker: str
    cik: str
    title: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"ticker": self.ticker, "cik": self.cik, "title": self.title}


@dataclass(frozen=True)
class TickerRegistry:
    """Point-in-time snapshot of the ticker directory."""

    entries: tuple[RegistryEntry, ...]
    fetched_at: float
    fetched_at_utc: datetime
    _by_ticker: Mapping[str, RegistryEntry] = field(
        default_factory=dict, repr=False, compare=False
    )

    @classmethod
    def build(
        cls, entries: Iterable[RegistryEntry], *, fetched_at: float
    ) -> "TickerRegistry":
        entries = tuple(entries)
        by_ticker: dict[str, RegistryEntry] = {}
        for e in entries:
            # First occurrence wins if the directory ever repeats a ticker.
            by_ticker.setdefault(e.ticker, e)
        return cls(
            entries=entries,
            fetched_at=fetched_at,
            fetched_at_utc=utcnow(),
            _by_ticker=by_ticker,
        )

    def lookup(self, ticker: str) -> RegistryEntry | None:
        return self._by_ticker.get(normalize_ticker(ticker))

    def age(self, now: float) -> float:
        return now - self.fetched_at

    def __len__(self) -> int:
        return len(self.entries)


def normalize_ticker(ticker: str | None) -> str:
    return str(ticker or "").strip().upper()


def _rows(payload: Any) -> list:
    """The directory is either a list of rows or an object keyed by row number."""

    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        return list(payload.values())
    return []


def parse_company_tickers(payload: Any) -> list[RegistryEntry]:
    """Normalize the raw directory JSON into registry entries.

    Rows without a ticker or without a numeric CIK are skipped.
    """

    out: list[RegistryEntry] = []
    skipped = 0
    for row in _rows(payload):
        if not isinstance(row, dict):
            skipped += 1
            continue

        ticker = normalize_ticker(row.get("ticker"))
        raw_cik = row.get("cik_str")
        if raw_cik is None:
            raw_cik = row.get("cik")

        if not ticker or raw_cik is None or not str(raw_cik).strip().isdigit():
            skipped += 1
            continue

        title = row.get("title")
        out.append(
            RegistryEntry(
                ticker=ticker,
                cik=pad_cik(raw_cik),
                title=str(title) if title is not None else None,
            )
        )

    if skipped:
        logger.debug("Skipped %s malformed ticker directory rows", skipped)
    return out


class RegistryCache:
    """Lazily fetched, TTL-bounded ticker registry.

    `fetcher` returns the raw directory JSON; `clock` returns monotonic seconds.
    Both are injectable so tests can control fetch counts and time.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        fetcher: Callable[[], Any] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")

        self._ttl_seconds = float(ttl_seconds)
        self._fetcher = fetcher or fetch_company_tickers
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: TickerRegistry | None = None

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    @property
    def snapshot(self) -> TickerRegistry | None:
        return self._snapshot

    def _is_fresh(self, snap: TickerRegistry | None) -> bool:
        return snap is not None and snap.age(self._clock()) < self._ttl_seconds

    def refresh(self) -> TickerRegistry:
        """Fetch a full directory snapshot and replace the current one.

        On failure the previous snapshot (if any) stays in place and the
        UpstreamError propagates.
        """

        with self._lock:
            return self._refresh_locked()

    def _refresh_locked(self) -> TickerRegistry:
        payload = self._fetcher()
        snap = TickerRegistry.build(
            parse_company_tickers(payload), fetched_at=self._clock()
        )
        self._snapshot = snap
        logger.info("Ticker registry refreshed | entries=%s", len(snap))
        return snap

    def current(self) -> TickerRegistry:
        """Return a fresh snapshot, fetching one if missing or stale."""

        snap = self._snapshot
        if self._is_fresh(snap):
            return snap  # type: ignore[return-value]

        with self._lock:
            # Another thread may have refreshed while we waited.
            snap = self._snapshot
            if self._is_fresh(snap):
                return snap  # type: ignore[return-value]
            return self._refresh_locked()

    def resolve(self, ticker: str) -> RegistryEntry:
        wanted = normalize_ticker(ticker)
        if not wanted:
            raise ValidationError("ticker is required")

        entry = self.current().lookup(wanted)
        if entry is None:
            raise NotFoundError("Ticker not found", details={"ticker": wanted})
        return entry


__all__ = [
    "RegistryEntry",
    "TickerRegistry",
    "RegistryCache",
    "normalize_ticker",
    "parse_company_tickers",
]
