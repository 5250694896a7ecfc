from __future__ import annotations

import pytest
import requests

import utils.sec_edgar_api as api
from pytests.common import FakeResponse, FakeSession
from utils.errors import UpstreamError, ValidationError


def test_user_agent_is_always_present(monkeypatch):
    monkeypatch.setitem(api.SETTINGS, "SEC_USER_AGENT", "UnitTest UA test@example.com")

    s = FakeSession({"https://example.test/": FakeResponse.json_body({})})

    api._request(url="https://example.test/", session=s)

    assert s.calls
    headers = s.calls[0]["headers"]
    assert "UnitTest UA" in headers["User-Agent"]
    assert headers["Accept-Encoding"] == "gzip, deflate"


def test_user_agent_placeholder_when_unset(monkeypatch):
    monkeypatch.setitem(api.SETTINGS, "SEC_USER_AGENT", "")

    s = FakeSession({"https://example.test/": FakeResponse(content=b"ok")})
    api._request(url="https://example.test/", session=s)

    assert s.calls[0]["headers"]["User-Agent"]


def test_timeout_is_passed_to_session(monkeypatch):
    monkeypatch.setitem(api.SETTINGS, "SEC_TIMEOUT_SECONDS", 7)

    s = FakeSession({"https://example.test/": FakeResponse(content=b"ok")})
    api._request(url="https://example.test/", session=s)

    assert s.calls[0]["timeout"] == 7.0


@pytest.mark.parametrize("status_code", [403, 404, 429, 500, 503])
def test_non_success_status_raises_upstream_error_without_retry(status_code):
    s = FakeSession(
        {"https://example.test/": FakeResponse(status_code=status_code, content=b"no")}
    )

    with pytest.raises(UpstreamError) as exc_info:
        api._request(url="https://example.test/", session=s)

    assert isinstance(exc_info.value, api.SecEdgarApiError)
    assert exc_info.value.upstream_status == status_code
    assert str(status_code) in str(exc_info.value)
    assert len(s.calls) == 1


def test_timeout_surfaces_as_upstream_error():
    s = FakeSession({"https://example.test/": requests.Timeout("slow")})

    with pytest.raises(UpstreamError, match="timed out"):
        api._request(url="https://example.test/", session=s, timeout_seconds=1)


def test_connection_error_surfaces_as_upstream_error():
    s = FakeSession({"https://example.test/": requests.ConnectionError("refused")})

    with pytest.raises(UpstreamError) as exc_info:
        api._request(url="https://example.test/", session=s)
    assert exc_info.value.upstream_status is None


def test_invalid_json_is_upstream_error():
    s = FakeSession({api.COMPANY_TICKERS_URL: FakeResponse(content=b"<html>")})

    with pytest.raises(UpstreamError, match="invalid JSON"):
        api.fetch_company_tickers(session=s)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("320193", "0000320193"),
        ("0000320193", "0000320193"),
        (320193, "0000320193"),
        (" 1 ", "0000000001"),
    ],
)
def test_pad_cik(raw, expected):
    assert api.pad_cik(raw) == expected


@pytest.mark.parametrize("raw", ["", "abc", "12-34", "-1"])
def test_pad_cik_rejects_non_numeric(raw):
    with pytest.raises(ValidationError):
        api.pad_cik(raw)


def test_filing_base_url_strips_zeros_and_dashes():
    assert (
        api.filing_base_url("0000320193", "0000320193-24-000123")
        == "https://www.sec.gov/Archives/edgar/data/320193/000032019324000123"
    )


def test_filing_base_url_requires_accession():
    with pytest.raises(ValidationError):
        api.filing_base_url("0000320193", " - ")


def test_fetch_submissions_uses_padded_cik():
    url = "https://data.sec.gov/submissions/CIK0000320193.json"
    s = FakeSession({url: FakeResponse.json_body({"cik": "320193"})})

    assert api.fetch_submissions("320193", session=s) == {"cik": "320193"}
    assert s.urls() == [url]


@pytest.mark.parametrize(
    "accession",
    ["../0000320193-24-000123", "0000320193-24-000123/index.json", "0000320193_24"],
)
def test_filing_base_url_rejects_path_characters(accession):
    with pytest.raises(ValidationError):
        api.filing_base_url("0000320193", accession)


def test_fetch_filing_document_returns_raw_bytes():
    body = '<?xml version="1.0" encoding="ISO-8859-1"?><a>é</a>'.encode("latin-1")
    s = FakeSession({"https://example.test/doc.xml": FakeResponse(content=body)})

    assert api.fetch_filing_document("https://example.test/doc.xml", session=s) == body
    assert "xml" in s.calls[0]["headers"]["Accept"]
