"""Form 4 pipeline: ticker -> CIK -> filings -> ownership XML -> summary.

`Form4Service` is created once per app (see `app.create_app`) and owns the
ticker registry cache. Everything else is fetched fresh per call.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from typing import Any

import requests

from logging_utils import get_logger
from utils.errors import ValidationError
from utils.filing_index import FilingLocation, locate
from utils.filing_list import (
    DEFAULT_RECENT_LIMIT,
    OWNERSHIP_FORM_TYPES,
    FilingHistory,
    filter_recent,
)
from utils.ownership_xml import decode_document, parse_ownership_document
from utils.sec_edgar_api import (
    fetch_company_tickers,
    fetch_filing_document,
    fetch_submissions,
    pad_cik,
)
from utils.ticker_registry import DEFAULT_TTL_SECONDS, RegistryCache, RegistryEntry
from utils.transaction_summary import classify

logger = get_logger(__name__)


def _require_filing_params(cik: str | None, accession: str | None) -> tuple[str, str]:
    cik = (cik or "").strip()
    accession = (accession or "").strip()
    missing = [name for name, v in (("cik", cik), ("accession", accession)) if not v]
    if missing:
        raise ValidationError(
            "Missing required query params: cik, accession",
            details={
                "missing": missing,
                "example": "?cik=0000320193&accession=0000320193-24-000123",
            },
        )
    return cik, accession


class Form4Service:
    def __init__(
        self,
        *,
        registry: RegistryCache | None = None,
        session: requests.Session | None = None,
        recent_limit: int = DEFAULT_RECENT_LIMIT,
        form_types: Collection[str] = OWNERSHIP_FORM_TYPES,
        registry_ttl_seconds: float = DEFAULT_TTL_SECONDS,
    ) -> None:
        self.session = session
        self.registry = registry or RegistryCache(
            ttl_seconds=registry_ttl_seconds,
            fetcher=lambda: fetch_company_tickers(session=self.session),
        )
        self.recent_limit = int(recent_limit)
        self.form_types = frozenset(form_types)

    def resolve_ticker(self, ticker: str) -> RegistryEntry:
        return self.registry.resolve(ticker)

    def list_recent_filings(self, ticker: str) -> dict[str, Any]:
        entry = self.resolve_ticker(ticker)
        submissions = fetch_submissions(entry.cik, session=self.session)

        history = FilingHistory.from_submissions(submissions)
        if history is None:
            logger.info("No recent filings block in submissions | cik=%s", entry.cik)

        filings = filter_recent(history, self.form_types, self.recent_limit)
        return {
            "ticker": entry.ticker,
            "cik": entry.cik,
            "filings": [f.to_dict() for f in filings],
        }

    def locate_document(self, cik: str, accession: str) -> FilingLocation:
        cik, accession = _require_filing_params(cik, accession)
        return locate(cik, accession, session=self.session)

    def fetch_document(self, cik: str, accession: str) -> tuple[bytes, FilingLocation]:
        """Raw ownership XML bytes, as served by the archive."""

        location = self.locate_document(cik, accession)
        content = fetch_filing_document(location.document_url, session=self.session)
        return content, location

    def fetch_document_text(self, cik: str, accession: str) -> tuple[str, FilingLocation]:
        content, location = self.fetch_document(cik, accession)
        return decode_document(content), location

    def get_details(self, cik: str, accession: str) -> dict[str, Any]:
        content, location = self.fetch_document(cik, accession)
        doc = parse_ownership_document(content)
        _buys, _sells, summary = classify(doc.transactions)

        logger.info(
            "Parsed ownership document | url=%s owners=%s transactions=%s buys=%s sells=%s",
            location.document_url,
            len(doc.reporting_owners),
            summary.count,
            summary.buy_count,
            summary.sell_count,
        )
        return {
            "cik": pad_cik(cik),
            "accession": accession.strip(),
            "source_url": location.document_url,
            "document_type": doc.document_type,
            "period_of_report": doc.period_of_report,
            "issuer": doc.issuer.to_dict(),
            "reporting_owners": [o.to_dict() for o in doc.reporting_owners],
            "transactions": [t.to_dict() for t in doc.transactions],
            "summary": summary.to_dict(),
        }


def build_form4_service(
    config: Mapping[str, Any], *, session: requests.Session | None = None
) -> Form4Service:
    """Create the service from Flask config / SETTINGS values.

    An explicit RECENT_FILINGS_LIMIT of 0 is honoured (empty listings).
    """

    limit = config.get("RECENT_FILINGS_LIMIT")
    return Form4Service(
        session=session,
        recent_limit=DEFAULT_RECENT_LIMIT if limit is None else int(limit),
        registry_ttl_seconds=float(
            config.get("TICKER_CACHE_TTL_SECONDS") or DEFAULT_TTL_SECONDS
        ),
    )
