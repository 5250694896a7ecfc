from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests

from logging_utils import get_logger
from settings import SETTINGS
from utils.errors import UpstreamError, ValidationError

logger = get_logger(__name__)


SEC_BASE_URL = "https://data.sec.gov"
SEC_WWW_BASE_URL = "https://www.sec.gov"
COMPANY_TICKERS_URL = f"{SEC_WWW_BASE_URL}/files/company_tickers.json"


class SecEdgarApiError(UpstreamError):
    def __init__(
        self, message: str, *, url: str, upstream_status: int | None = None
    ) -> None:
        super().__init__(
            message, details={"url": url, "upstream_status": upstream_status}
        )
        self.url = url
        self.upstream_status = upstream_status


@dataclass(frozen=True)
class SecResponse:
    url: str
    status_code: int
    content: bytes
    content_type: str | None

    def text(self, encoding: str | None = None) -> str:
        if encoding is not None:
            return self.content.decode(encoding, errors="replace")
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        try:
            return requests.models.complexjson.loads(self.text())
        except ValueError as e:
            raise SecEdgarApiError(
                f"SEC returned invalid JSON for {self.url}: {e}",
                url=self.url,
                upstream_status=self.status_code,
            ) from e


def _safe_preview_bytes(data: bytes | None, *, limit: int = 300) -> str:
    """Log-safe preview of a response body, truncated to `limit` bytes."""

    if not data:
        return ""
    return data[:limit].decode("utf-8", errors="replace")


def _headers_for_log(headers: dict[str, str]) -> dict[str, str]:
    """Return a redacted copy of headers for logging."""

    redacted: dict[str, str] = {}
    for k, v in (headers or {}).items():
        lk = str(k).lower()
        if (
            lk in {"authorization", "x-api-key", "api-key"}
            or "token" in lk
            or "secret" in lk
        ):
            redacted[str(k)] = "<redacted>"
        else:
            redacted[str(k)] = str(v)
    return redacted


def _sec_user_agent() -> str:
    """Resolve User-Agent for SEC requests.

    SEC requires a descriptive UA that includes contact info.

    Configure via:
      SEC_USER_AGENT="AppName your@email.com"   (or USER_AGENT)

    If missing, falls back to a placeholder, but deployments should set it.
    """

    ua = SETTINGS.get("SEC_USER_AGENT")
    if isinstance(ua, str) and ua.strip():
        return ua.strip()
    return "InsiderFilings (contact: unset)"


def _timeout_seconds() -> float:
    try:
        return float(SETTINGS.get("SEC_TIMEOUT_SECONDS") or 30)
    except (TypeError, ValueError):
        return 30.0


def _request(
    *,
    url: str,
    session: requests.Session | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float | None = None,
) -> SecResponse:
    """HTTP GET with SEC constraints (UA + timeout). Failures are not retried."""

    s = session or requests.Session()
    timeout = _timeout_seconds() if timeout_seconds is None else timeout_seconds

    merged_headers = {
        "User-Agent": _sec_user_agent(),
        "Accept-Encoding": "gzip, deflate",
    }
    if headers:
        merged_headers.update(headers)

    try:
        resp = s.get(url, headers=merged_headers, timeout=timeout)
    except requests.Timeout as e:
        logger.warning("SEC request timed out | url=%s timeout=%s", url, timeout)
        raise SecEdgarApiError(
            f"SEC request timed out after {timeout}s for {url}", url=url
        ) from e
    except requests.RequestException as e:
        logger.warning("SEC request failed | url=%s err=%s", url, e)
        raise SecEdgarApiError(f"SEC request failed for {url}: {e}", url=url) from e

    if 200 <= resp.status_code < 300:
        return SecResponse(
            url=url,
            status_code=resp.status_code,
            content=resp.content,
            content_type=resp.headers.get("Content-Type"),
        )

    preview = _safe_preview_bytes(getattr(resp, "content", b""))
    logger.warning(
        "SEC non-2xx response | status=%s url=%s content_type=%s headers=%s body_preview=%s",
        resp.status_code,
        url,
        resp.headers.get("Content-Type"),
        _headers_for_log(merged_headers),
        preview,
    )
    raise SecEdgarApiError(
        f"SEC request failed {resp.status_code} for {url}",
        url=url,
        upstream_status=resp.status_code,
    )


def pad_cik(cik: int | str) -> str:
    """Normalize a CIK to the 10-digit zero-padded form ('320193' -> '0000320193')."""

    raw = str(cik).strip()
    if not raw.isdigit():
        raise ValidationError(f"CIK must be numeric, got {cik!r}")
    return str(int(raw)).zfill(10)


def accession_no_dashes(accession: str) -> str:
    return str(accession).strip().replace("-", "")


def filing_base_url(cik: str, accession: str) -> str:
    """Archive directory of one filing.

    EDGAR archive paths use the non-zero-padded CIK and the dashless accession:
      https://www.sec.gov/Archives/edgar/data/320193/000032019324000123
    """

    cik_nozeros = str(int(pad_cik(cik)))
    raw = str(accession).strip()
    if raw and not set(raw) <= set("0123456789-"):
        raise ValidationError(
            f"accession number may only contain digits and dashes, got {accession!r}"
        )
    acc = accession_no_dashes(raw)
    if not acc:
        raise ValidationError("accession number is required")
    return f"{SEC_WWW_BASE_URL}/Archives/edgar/data/{cik_nozeros}/{acc}"


def fetch_company_tickers(*, session: requests.Session | None = None) -> Any:
    """Fetch the ticker -> CIK directory snapshot.

    Endpoint:
      https://www.sec.gov/files/company_tickers.json
    """

    r = _request(
        url=COMPANY_TICKERS_URL, session=session, headers={"Accept": "application/json"}
    )
    return r.json()


def fetch_submissions(cik: str, *, session: requests.Session | None = None) -> dict:
    """Fetch SEC submissions JSON for a CIK.

    Endpoint:
      https://data.sec.gov/submissions/CIK##########.json
    """

    url = f"{SEC_BASE_URL}/submissions/CIK{pad_cik(cik)}.json"
    r = _request(url=url, session=session, headers={"Accept": "application/json"})
    payload = r.json()
    return payload if isinstance(payload, dict) else {}


def fetch_filing_index(
    cik: str,
    accession_number: str,
    *,
    session: requests.Session | None = None,
) -> tuple[str, dict]:
    """Fetch the directory listing (index.json) of one filing.

    Returns (index_url, payload).
    """

    index_url = f"{filing_base_url(cik, accession_number)}/index.json"
    r = _request(url=index_url, session=session, headers={"Accept": "application/json"})
    payload = r.json()
    return index_url, payload if isinstance(payload, dict) else {}


def fetch_filing_document(
    url: str, *, session: requests.Session | None = None
) -> bytes:
    """Fetch a filing document (raw bytes).

    Bytes are returned undecoded so XML parsers can honour the document's own
    encoding declaration.
    """

    r = _request(
        url=url,
        session=session,
        headers={"Accept": "application/xml,text/xml,*/*"},
    )
    return r.content
