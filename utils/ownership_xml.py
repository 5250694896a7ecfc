"""Form 4 ownership XML -> typed records.

The XML is first converted into a plain nested mapping (one key per child
element, repeated children as lists, attributes as ``@_name``). Field access
then goes through `dig`, which returns None as soon as a level is missing,
so optional sections of a filing never raise.

Sections that may hold one entry or many (``reportingOwner``,
``nonDerivativeTransaction``) are always passed through `as_list`.
"""

from __future__ import annotations

import math
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any

from utils.errors import ParseError
from utils.value_parsing import parse_finite_float

_ROOT_NAMES = ("ownershipDocument", "OwnershipDocument")
_XML_DECL_ENCODING = re.compile(
    rb"""^\s*<\?xml[^>]*?encoding\s*=\s*["']([A-Za-z0-9._-]+)["']"""
)


def _local_name(tag: str) -> str:
    # '{namespace}name' -> 'name'
    return tag.rsplit("}", 1)[-1]


def _add_child(node: dict, key: str, value: Any) -> None:
    if key not in node:
        node[key] = value
    elif isinstance(node[key], list):
        node[key].append(value)
    else:
        node[key] = [node[key], value]


def element_to_value(el: ET.Element) -> Any:
    """Convert one element: leaf -> trimmed text, otherwise -> dict."""

    text = (el.text or "").strip()
    children = list(el)
    if not children and not el.attrib:
        return text

    node: dict[str, Any] = {f"@_{_local_name(k)}": v for k, v in el.attrib.items()}
    for child in children:
        _add_child(node, _local_name(child.tag), element_to_value(child))
    if text:
        node["#text"] = text
    return node


def xml_to_mapping(xml_text: str | bytes) -> dict[str, Any]:
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise ParseError(f"Ownership document is not well-formed XML: {e}") from e
    return {_local_name(root.tag): element_to_value(root)}


def decode_document(content: bytes) -> str:
    """Decode raw XML bytes using the encoding named in its declaration.

    Documents without a declaration (or naming an unknown codec) are read as
    UTF-8.
    """

    m = _XML_DECL_ENCODING.match(content)
    encoding = m.group(1).decode("ascii") if m else "utf-8"
    try:
        return content.decode(encoding, errors="replace")
    except LookupError:
        return content.decode("utf-8", errors="replace")


def as_list(value: Any) -> list:
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    return [value]


def dig(node: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def text_of(node: Any) -> str | None:
    """Text content of a leaf (or of an attribute-bearing element); '' -> None."""

    if isinstance(node, dict):
        node = node.get("#text")
    if isinstance(node, str) and node:
        return node
    return None


def _first_text(node: Any, *paths: tuple[str, ...]) -> str | None:
    for path in paths:
        value = text_of(dig(node, *path))
        if value is not None:
            return value
    return None


@dataclass(frozen=True)
class Issuer:
    name: str | None = None
    trading_symbol: str | None = None
    cik: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "trading_symbol": self.trading_symbol,
            "cik": self.cik,
        }


@dataclass(frozen=True)
class ReportingOwner:
    name: str | None
    cik: str | None
    relationship: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "cik": self.cik,
            "relationship": dict(self.relationship),
        }


@dataclass(frozen=True)
class Transaction:
    security_title: str | None = None
    transaction_date: str | None = None
    transaction_code: str | None = None
    acquired_disposed: str | None = None
    shares: float | None = None
    price_per_share: float | None = None
    total_value: float | None = None
    ownership_type: str | None = None
    shares_owned_following: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "security_title": self.security_title,
            "transaction_date": self.transaction_date,
            "transaction_code": self.transaction_code,
            "acquired_disposed": self.acquired_disposed,
            "shares": self.shares,
            "price_per_share": self.price_per_share,
            "total_value": self.total_value,
            "ownership_type": self.ownership_type,
            "shares_owned_following": self.shares_owned_following,
        }


@dataclass(frozen=True)
class OwnershipDocument:
    issuer: Issuer
    reporting_owners: tuple[ReportingOwner, ...]
    transactions: tuple[Transaction, ...]
    document_type: str | None = None
    period_of_report: str | None = None


def total_value(shares: float | None, price: float | None) -> float | None:
    if shares is None or price is None:
        return None
    value = shares * price
    return value if math.isfinite(value) else None


def _parse_owner(raw: Any) -> ReportingOwner:
    relationship = dig(raw, "reportingOwnerRelationship")
    return ReportingOwner(
        # Older filings use the long field names.
        name=_first_text(
            raw,
            ("reportingOwnerId", "rptOwnerName"),
            ("reportingOwnerId", "reportingOwnerName"),
        ),
        cik=_first_text(
            raw,
            ("reportingOwnerId", "rptOwnerCik"),
            ("reportingOwnerId", "reportingOwnerCik"),
        ),
        relationship=dict(relationship) if isinstance(relationship, dict) else {},
    )


def _parse_transaction(raw: Any) -> Transaction:
    amounts = dig(raw, "transactionAmounts")
    shares = parse_finite_float(text_of(dig(amounts, "transactionShares", "value")))
    price = parse_finite_float(
        text_of(dig(amounts, "transactionPricePerShare", "value"))
    )
    return Transaction(
        security_title=text_of(dig(raw, "securityTitle", "value")),
        transaction_date=text_of(dig(raw, "transactionDate", "value")),
        transaction_code=text_of(dig(raw, "transactionCoding", "transactionCode")),
        acquired_disposed=text_of(
            dig(amounts, "transactionAcquiredDisposedCode", "value")
        ),
        shares=shares,
        price_per_share=price,
        total_value=total_value(shares, price),
        ownership_type=text_of(
            dig(raw, "ownershipNature", "directOrIndirectOwnership", "value")
        ),
        shares_owned_following=parse_finite_float(
            text_of(
                dig(
                    raw,
                    "postTransactionAmounts",
                    "sharesOwnedFollowingTransaction",
                    "value",
                )
            )
        ),
    )


def _document_root(mapping: dict[str, Any]) -> Any:
    for name in _ROOT_NAMES:
        if mapping.get(name) is not None:
            return mapping[name]
    return mapping


def parse_ownership_document(xml_text: str | bytes) -> OwnershipDocument:
    """Parse a Form 4 XML document.

    Raises:
        ParseError: if the input is not well-formed XML.
    """

    root = _document_root(xml_to_mapping(xml_text))

    issuer = Issuer(
        name=text_of(dig(root, "issuer", "issuerName")),
        trading_symbol=text_of(dig(root, "issuer", "issuerTradingSymbol")),
        cik=text_of(dig(root, "issuer", "issuerCik")),
    )
    owners = tuple(_parse_owner(o) for o in as_list(dig(root, "reportingOwner")))
    transactions = tuple(
        _parse_transaction(t)
        for t in as_list(dig(root, "nonDerivativeTable", "nonDerivativeTransaction"))
    )

    return OwnershipDocument(
        issuer=issuer,
        reporting_owners=owners,
        transactions=transactions,
        document_type=text_of(dig(root, "documentType")),
        period_of_report=text_of(dig(root, "periodOfReport")),
    )


__all__ = [
    "Issuer",
    "ReportingOwner",
    "Transaction",
    "OwnershipDocument",
    "as_list",
    "dig",
    "text_of",
    "xml_to_mapping",
    "decode_document",
    "parse_ownership_document",
]
