from __future__ import annotations

from flask import Blueprint, Response, current_app, jsonify, request

from api.schemas.api_responses import ok
from api.services.form4_service import Form4Service

form4_v1_bp = Blueprint("form4_v1", __name__, url_prefix="/form4")


def _service() -> Form4Service:
    return current_app.extensions["form4_service"]


def _filing_params() -> tuple[str, str]:
    cik = (request.args.get("cik") or "").strip()
    accession = (request.args.get("accession") or "").strip()
    return cik, accession


# Fixed paths are declared before "/<ticker>" so they are never read as tickers.


@form4_v1_bp.get("/details")
def get_details():
    """Parsed ownership document + buy/sell summary for one filing."""

    cik, accession = _filing_params()
    return jsonify(ok(_service().get_details(cik, accession)))


@form4_v1_bp.get("/xml")
def get_xml():
    """Raw ownership XML bytes, with the chosen archive location in headers."""

    cik, accession = _filing_params()
    content, location = _service().fetch_document(cik, accession)

    # Bytes pass through untouched; the XML declaration names the charset.
    resp = Response(content, content_type="application/xml")
    resp.headers["X-EDGAR-Base"] = location.base_url
    resp.headers["X-EDGAR-XML-File"] = location.document_filename or "unknown.xml"
    return resp


@form4_v1_bp.get("/xml-locate")
def locate_xml():
    cik, accession = _filing_params()
    return jsonify(ok(_service().locate_document(cik, accession).to_dict()))


@form4_v1_bp.get("/cik/<ticker>")
def get_cik(ticker: str):
    entry = _service().resolve_ticker(ticker)
    return jsonify(ok(entry.to_dict()))


@form4_v1_bp.get("/<ticker>")
def get_recent_by_ticker(ticker: str):
    """Most recent Form 4 / 4-A filings for a ticker (newest first)."""

    return jsonify(ok(_service().list_recent_filings(ticker)))
