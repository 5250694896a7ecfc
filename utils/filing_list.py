from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass
from typing import Any

OWNERSHIP_FORM_TYPES: frozenset[str] = frozenset({"4", "4/A"})
DEFAULT_RECENT_LIMIT = 25


@dataclass(frozen=True)
class FilingSummary:
    form_type: str | None
    accession_number: str | None
    filing_date: str | None
    report_date: str | None
    primary_document: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "form_type": self.form_type,
            "accession_number": self.accession_number,
            "filing_date": self.filing_date,
            "report_date": self.report_date,
            "primary_document": self.primary_document,
        }


def _column(recent: dict, name: str) -> tuple:
    values = recent.get(name)
    return tuple(values) if isinstance(values, list) else ()


def _at(values: Sequence, i: int):
    return values[i] if i < len(values) else None


@dataclass(frozen=True)
class FilingHistory:
    """Columnar filing list from the submissions endpoint.

    Position i of every column describes the same filing. Source order is
    most-recent-first.
    """

    form: tuple = ()
    accession_number: tuple = ()
    filing_date: tuple = ()
    report_date: tuple = ()
    primary_document: tuple = ()

    @classmethod
    def from_submissions(cls, payload: Any) -> "FilingHistory | None":
        """Read `filings.recent` from a submissions JSON; None when absent."""

        if not isinstance(payload, dict):
            return None
        filings = payload.get("filings")
        recent = filings.get("recent") if isinstance(filings, dict) else None
        if not isinstance(recent, dict):
            return None

        return cls(
            form=_column(recent, "form"),
            accession_number=_column(recent, "accessionNumber"),
            filing_date=_column(recent, "filingDate"),
            report_date=_column(recent, "reportDate"),
            primary_document=_column(recent, "primaryDocument"),
        )

    def __len__(self) -> int:
        return len(self.form)

    def summary_at(self, i: int) -> FilingSummary:
        return FilingSummary(
            form_type=_at(self.form, i),
            accession_number=_at(self.accession_number, i),
            filing_date=_at(self.filing_date, i),
            report_date=_at(self.report_date, i),
            primary_document=_at(self.primary_document, i),
        )


def filter_recent(
    history: FilingHistory | None,
    form_types: Collection[str] = OWNERSHIP_FORM_TYPES,
    limit: int = DEFAULT_RECENT_LIMIT,
) -> list[FilingSummary]:
    """Filings whose form type is in `form_types`, in source order, at most `limit`.

    The whole history is scanned; truncation happens after filtering.
    """

    if history is None:
        return []

    wanted = frozenset(form_types)
    out = [history.summary_at(i) for i, form in enumerate(history.form) if form in wanted]
    return out[: max(0, int(limit))]
