from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import requests

from logging_utils import get_logger
from utils.errors import NoDocumentError
from utils.sec_edgar_api import fetch_filing_index, filing_base_url

logger = get_logger(__name__)

# Usual names of the ownership XML inside a Form 4 filing directory.
PREFERRED_XML_NAMES: tuple[str, ...] = ("form4.xml", "primary_doc.xml", "doc1.xml")


@dataclass(frozen=True)
class FilingLocation:
    base_url: str
    index_url: str
    document_url: str
    document_filename: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "base_url": self.base_url,
            "index_url": self.index_url,
            "document_url": self.document_url,
            "document_filename": self.document_filename,
        }


def listed_file_names(index_payload: Any) -> list[str]:
    """File names from an index.json payload: {directory: {item: [{name, ...}]}}."""

    if not isinstance(index_payload, dict):
        return []
    directory = index_payload.get("directory")
    items = directory.get("item") if isinstance(directory, dict) else None
    if isinstance(items, dict):
        items = [items]
    if not isinstance(items, list):
        return []

    names = []
    for item in items:
        name = item.get("name") if isinstance(item, dict) else None
        names.append(str(name) if name is not None else "")
    return names


def select_xml_document(names: Iterable[str]) -> str | None:
    """Pick the ownership XML among the listed files.

    First match wins, scanning in listing order:
      1. a name in PREFERRED_XML_NAMES (case-insensitive)
      2. a name containing "form4"
      3. the first .xml file
    """

    xml_files = [n for n in names if n.lower().endswith(".xml")]
    if not xml_files:
        return None

    for name in xml_files:
        if name.lower() in PREFERRED_XML_NAMES:
            return name
    for name in xml_files:
        if "form4" in name.lower():
            return name
    return xml_files[0]


def locate(
    cik: str, accession: str, *, session: requests.Session | None = None
) -> FilingLocation:
    """Resolve the ownership XML of one filing to an absolute URL."""

    base_url = filing_base_url(cik, accession)
    index_url, payload = fetch_filing_index(cik, accession, session=session)

    chosen = select_xml_document(listed_file_names(payload))
    if chosen is None:
        raise NoDocumentError(
            f"No XML files found in index.json for {index_url}",
            details={"index_url": index_url},
        )

    logger.debug("Selected filing document | index=%s file=%s", index_url, chosen)
    return FilingLocation(
        base_url=base_url,
        index_url=index_url,
        document_url=f"{base_url}/{chosen}",
        document_filename=chosen,
    )
