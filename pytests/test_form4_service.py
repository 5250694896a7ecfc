from __future__ import annotations

import pytest

from api.services.form4_service import Form4Service, build_form4_service
from pytests.common import (
    ACCESSION,
    ARCHIVE_BASE,
    INDEX_URL,
    SUBMISSIONS_URL,
    LATIN1_FORM4_XML,
    FakeResponse,
    FakeSession,
    default_routes,
)
from utils.errors import ValidationError


def test_resolve_ticker(form4_service):
    assert form4_service.resolve_ticker("aapl").cik == "0000320193"


def test_list_recent_filings_filters_and_orders(form4_service, sec_session):
    out = form4_service.list_recent_filings("AAPL")

    assert out["ticker"] == "AAPL"
    assert out["cik"] == "0000320193"
    assert [f["form_type"] for f in out["filings"]] == ["4", "4/A", "4", "4"]
    dates = [f["filing_date"] for f in out["filings"]]
    assert dates == sorted(dates, reverse=True)
    assert SUBMISSIONS_URL in sec_session.urls()


def test_recent_limit_is_configurable():
    s = FakeSession(default_routes(forms=["4"] * 10))
    service = Form4Service(session=s, recent_limit=3)

    assert len(service.list_recent_filings("AAPL")["filings"]) == 3


def test_fetch_document_text_requests_index_then_document(form4_service, sec_session):
    text, location = form4_service.fetch_document_text("0000320193", ACCESSION)

    assert text.lstrip().startswith("<?xml")
    assert location.document_filename == "form4.xml"
    assert sec_session.urls() == [INDEX_URL, f"{ARCHIVE_BASE}/form4.xml"]


def test_get_details_summary(form4_service):
    out = form4_service.get_details("320193", f" {ACCESSION} ")

    assert out["cik"] == "0000320193"
    assert out["accession"] == ACCESSION
    assert out["period_of_report"] == "2024-04-01"
    assert out["summary"] == {"count": 2, "buys": 1, "sells": 1}


@pytest.mark.parametrize(
    "cik,accession,missing",
    [
        ("", ACCESSION, ["cik"]),
        ("0000320193", "", ["accession"]),
        (None, None, ["cik", "accession"]),
        ("  ", "  ", ["cik", "accession"]),
    ],
)
def test_missing_filing_params(form4_service, sec_session, cik, accession, missing):
    with pytest.raises(ValidationError) as exc_info:
        form4_service.get_details(cik, accession)

    assert exc_info.value.details["missing"] == missing
    assert sec_session.calls == []


def test_build_from_config():
    service = build_form4_service(
        {"RECENT_FILINGS_LIMIT": 7, "TICKER_CACHE_TTL_SECONDS": 60}
    )
    assert service.recent_limit == 7
    assert service.registry.ttl_seconds == 60.0


def test_build_from_config_defaults():
    service = build_form4_service({})
    assert service.recent_limit == 25
    assert service.registry.ttl_seconds == 24 * 60 * 60


def test_build_from_config_honours_zero_limit(sec_session):
    service = build_form4_service({"RECENT_FILINGS_LIMIT": 0}, session=sec_session)

    assert service.recent_limit == 0
    assert service.list_recent_filings("AAPL")["filings"] == []


def test_latin1_document_text_and_details(sec_session):
    sec_session.routes[f"{ARCHIVE_BASE}/form4.xml"] = FakeResponse(
        content=LATIN1_FORM4_XML
    )
    service = Form4Service(session=sec_session)

    raw, _location = service.fetch_document("0000320193", ACCESSION)
    text, _location = service.fetch_document_text("0000320193", ACCESSION)
    details = service.get_details("0000320193", ACCESSION)

    assert raw == LATIN1_FORM4_XML
    assert "Muñoz José" in text
    assert details["reporting_owners"][0]["name"] == "Muñoz José"
