"""Error taxonomy for the filing pipeline.

Each error carries a stable `code` and the HTTP status the API maps it to.
Client-facing: ValidationError, NotFoundError. Everything else is an
upstream/server problem.
"""

from __future__ import annotations

from typing import Any


class FilingsError(RuntimeError):
    code = "error"
    status_code = 500

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(FilingsError):
    """Required request parameters are missing or malformed."""

    code = "validation_error"
    status_code = 400


class NotFoundError(FilingsError):
    """Ticker (or watchlist item) does not exist."""

    code = "not_found"
    status_code = 404


class UpstreamError(FilingsError):
    """SEC returned a non-success status or could not be reached."""

    code = "upstream_error"
    status_code = 502


class NoDocumentError(FilingsError):
    """Filing directory has no usable XML document."""

    code = "no_document"
    status_code = 502


class ParseError(FilingsError):
    """Ownership document is not well-formed XML."""

    code = "parse_error"
    status_code = 502


__all__ = [
    "FilingsError",
    "ValidationError",
    "NotFoundError",
    "UpstreamError",
    "NoDocumentError",
    "ParseError",
]
