"""Shared helpers for tests.

Intended usage:
- spin up a temporary SQLite database and point the app at it
- fake `requests.Session` that serves canned SEC responses by URL
- sample SEC payloads (ticker directory, submissions, index.json, Form 4 XML)

These utilities keep tests small and consistent.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

import db
from models import Base

__all__ = [
    "make_sqlite_engine",
    "create_empty_sqlite_db",
    "patch_app_db",
    "FakeResponse",
    "FakeSession",
    "TICKERS_URL",
    "SUBMISSIONS_URL",
    "ARCHIVE_BASE",
    "INDEX_URL",
    "ACCESSION",
    "COMPANY_TICKERS",
    "FORM4_XML",
    "make_submissions",
    "make_index",
    "default_routes",
    "add_filing",
    "LATIN1_FORM4_XML",
]


def make_sqlite_engine(db_path: Path | str) -> Engine:
    """Create a SQLite engine suitable for tests."""

    if isinstance(db_path, Path):
        db_path = str(db_path)
    return create_engine(f"sqlite:///{db_path}")


def create_empty_sqlite_db(db_path: Path) -> tuple[Session, Engine]:
    """Create an empty SQLite DB file and initialize all models.

    Returns (session, engine).
    """

    engine = make_sqlite_engine(db_path)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    return SessionLocal(), engine


def patch_app_db(monkeypatch, engine: Engine) -> None:
    """Point `db.engine` / `db.SessionLocal` at a test engine."""

    monkeypatch.setattr(db, "engine", engine)
    monkeypatch.setattr(
        db,
        "SessionLocal",
        sessionmaker(autocommit=False, autoflush=False, bind=engine),
    )


class FakeResponse:
    def __init__(
        self,
        *,
        status_code: int = 200,
        content: bytes = b"",
        headers: dict | None = None,
    ):
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}

    @classmethod
    def json_body(cls, payload: Any, status_code: int = 200) -> "FakeResponse":
        return cls(
            status_code=status_code,
            content=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

    @classmethod
    def xml_body(cls, text: str) -> "FakeResponse":
        return cls(
            content=text.encode("utf-8"),
            headers={"Content-Type": "application/xml"},
        )


class FakeSession:
    """Serves responses by exact URL; unknown URLs get a 404."""

    def __init__(self, routes: dict[str, Any] | None = None):
        self.routes = dict(routes or {})
        self.calls: list[dict] = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": headers or {}, "timeout": timeout})
        r = self.routes.get(url)
        if r is None:
            return FakeResponse(status_code=404, content=b"Not Found")
        if isinstance(r, Exception):
            raise r
        return r

    def urls(self) -> list[str]:
        return [c["url"] for c in self.calls]


TICKERS_URL = "https://www.sec.gov/files/company_tickers.json"
SUBMISSIONS_URL = "https://data.sec.gov/submissions/CIK0000320193.json"
ACCESSION = "0000320193-24-000123"
ARCHIVE_BASE = "https://www.sec.gov/Archives/edgar/data/320193/000032019324000123"
INDEX_URL = f"{ARCHIVE_BASE}/index.json"

COMPANY_TICKERS: dict[str, dict] = {
    "0": {"cik_str": 320193, "ticker": "AAPL", "title": "Apple Inc."},
    "1": {"cik_str": 789019, "ticker": "MSFT", "title": "MICROSOFT CORP"},
    "2": {"cik_str": 1318605, "ticker": "TSLA", "title": "Tesla, Inc."},
}


def make_submissions(forms: list[str]) -> dict:
    """Submissions JSON whose `filings.recent` lists `forms` newest first."""

    n = len(forms)
    return {
        "cik": "320193",
        "name": "Apple Inc.",
        "filings": {
            "recent": {
                "accessionNumber": [f"0000320193-24-{n - i:06d}" for i in range(n)],
                "filingDate": [f"2024-{12 - (i % 12):02d}-01" for i in range(n)],
                "reportDate": [f"2024-{12 - (i % 12):02d}-01" for i in range(n)],
                "form": list(forms),
                "primaryDocument": [f"doc{n - i}.xml" for i in range(n)],
            },
            "files": [],
        },
    }


def make_index(*names: str) -> dict:
    return {
        "directory": {
            "name": "/Archives/edgar/data/320193/000032019324000123",
            "item": [{"name": n, "type": "text.gif", "size": "1"} for n in names],
        }
    }


FORM4_XML = """<?xml version="1.0"?>
<ownershipDocument>
    <schemaVersion>X0508</schemaVersion>
    <documentType>4</documentType>
    <periodOfReport>2024-04-01</periodOfReport>
    <issuer>
        <issuerCik>0000320193</issuerCik>
        <issuerName>Apple Inc.</issuerName>
        <issuerTradingSymbol>AAPL</issuerTradingSymbol>
    </issuer>
    <reportingOwner>
        <reportingOwnerId>
            <rptOwnerCik>0001214156</rptOwnerCik>
            <rptOwnerName>COOK TIMOTHY D</rptOwnerName>
        </reportingOwnerId>
        <reportingOwnerRelationship>
            <isDirector>1</isDirector>
            <isOfficer>1</isOfficer>
            <officerTitle>Chief Executive Officer</officerTitle>
        </reportingOwnerRelationship>
    </reportingOwner>
    <nonDerivativeTable>
        <nonDerivativeTransaction>
            <securityTitle><value>Common Stock</value></securityTitle>
            <transactionDate><value>2024-04-01</value></transactionDate>
            <transactionCoding>
                <transactionFormType>4</transactionFormType>
                <transactionCode>S</transactionCode>
                <equitySwapInvolved>0</equitySwapInvolved>
            </transactionCoding>
            <transactionAmounts>
                <transactionShares><value>100</value></transactionShares>
                <transactionPricePerShare><value>12.5</value></transactionPricePerShare>
                <transactionAcquiredDisposedCode><value>D</value></transactionAcquiredDisposedCode>
            </transactionAmounts>
            <postTransactionAmounts>
                <sharesOwnedFollowingTransaction><value>3280180</value></sharesOwnedFollowingTransaction>
            </postTransactionAmounts>
            <ownershipNature>
                <directOrIndirectOwnership><value>D</value></directOrIndirectOwnership>
            </ownershipNature>
        </nonDerivativeTransaction>
        <nonDerivativeTransaction>
            <securityTitle><value>Common Stock</value></securityTitle>
            <transactionDate><value>2024-04-01</value></transactionDate>
            <transactionCoding>
                <transactionFormType>4</transactionFormType>
                <transactionCode>M</transactionCode>
                <equitySwapInvolved>0</equitySwapInvolved>
            </transactionCoding>
            <transactionAmounts>
                <transactionShares><value>200</value></transactionShares>
                <transactionPricePerShare><footnoteId id="F1"/></transactionPricePerShare>
                <transactionAcquiredDisposedCode><value>A</value></transactionAcquiredDisposedCode>
            </transactionAmounts>
            <ownershipNature>
                <directOrIndirectOwnership><value>I</value></directOrIndirectOwnership>
            </ownershipNature>
        </nonDerivativeTransaction>
    </nonDerivativeTable>
</ownershipDocument>
"""


def default_routes(
    *,
    forms: list[str] | None = None,
    index_names: tuple[str, ...] = (
        "0000320193-24-000123-index.htm",
        "form4.xml",
        "0000320193-24-000123.txt",
    ),
    xml_text: str = FORM4_XML,
) -> dict[str, Any]:
    """Canned SEC responses for AAPL and one Form 4 filing."""

    if forms is None:
        forms = ["8-K", "4", "10-Q", "4/A", "4", "SC 13G/A", "4"]

    routes: dict[str, Any] = {
        TICKERS_URL: FakeResponse.json_body(COMPANY_TICKERS),
        SUBMISSIONS_URL: FakeResponse.json_body(make_submissions(forms)),
        INDEX_URL: FakeResponse.json_body(make_index(*index_names)),
    }
    for name in index_names:
        if name.lower().endswith(".xml"):
            routes[f"{ARCHIVE_BASE}/{name}"] = FakeResponse.xml_body(xml_text)
    return routes


def add_filing(
    routes: dict[str, Any],
    accession: str,
    *,
    index_names: tuple[str, ...] = ("form4.xml",),
    xml_text: str = FORM4_XML,
) -> dict[str, Any]:
    """Serve index.json (and any listed .xml) for another AAPL accession."""

    base = f"https://www.sec.gov/Archives/edgar/data/320193/{accession.replace('-', '')}"
    routes[f"{base}/index.json"] = FakeResponse.json_body(make_index(*index_names))
    for name in index_names:
        if name.lower().endswith(".xml"):
            routes[f"{base}/{name}"] = FakeResponse.xml_body(xml_text)
    return routes


# Same filing shape as FORM4_XML, declared and encoded as ISO-8859-1.
LATIN1_FORM4_XML: bytes = (
    FORM4_XML.replace('<?xml version="1.0"?>', '<?xml version="1.0" encoding="ISO-8859-1"?>')
    .replace("COOK TIMOTHY D", "Muñoz José")
    .encode("latin-1")
)
