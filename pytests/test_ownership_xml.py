from __future__ import annotations

import pytest

from pytests.common import FORM4_XML
from utils.errors import ParseError
from utils.ownership_xml import (
    as_list,
    decode_document,
    dig,
    parse_ownership_document,
    text_of,
    xml_to_mapping,
)


def test_parse_sample_form4():
    doc = parse_ownership_document(FORM4_XML)

    assert doc.document_type == "4"
    assert doc.period_of_report == "2024-04-01"
    assert doc.issuer.name == "Apple Inc."
    assert doc.issuer.trading_symbol == "AAPL"
    assert doc.issuer.cik == "0000320193"

    assert len(doc.reporting_owners) == 1
    owner = doc.reporting_owners[0]
    assert owner.name == "COOK TIMOTHY D"
    assert owner.cik == "0001214156"
    assert owner.relationship["officerTitle"] == "Chief Executive Officer"
    assert owner.relationship["isDirector"] == "1"

    assert len(doc.transactions) == 2
    sale, exercise = doc.transactions
    assert sale.security_title == "Common Stock"
    assert sale.transaction_code == "S"
    assert sale.acquired_disposed == "D"
    assert sale.shares == 100.0
    assert sale.price_per_share == 12.5
    assert sale.total_value == 1250.0
    assert sale.ownership_type == "D"
    assert sale.shares_owned_following == 3280180.0

    # Price given only as a footnote reference.
    assert exercise.transaction_code == "M"
    assert exercise.shares == 200.0
    assert exercise.price_per_share is None
    assert exercise.total_value is None
    assert exercise.ownership_type == "I"
    assert exercise.shares_owned_following is None


def test_transaction_dict_keys():
    doc = parse_ownership_document(FORM4_XML)
    assert set(doc.transactions[0].to_dict()) == {
        "security_title",
        "transaction_date",
        "transaction_code",
        "acquired_disposed",
        "shares",
        "price_per_share",
        "total_value",
        "ownership_type",
        "shares_owned_following",
    }


def test_single_and_multiple_owners_are_sequences():
    xml = """<ownershipDocument>
      <issuer><issuerName>X</issuerName></issuer>
      <reportingOwner><reportingOwnerId><rptOwnerName>A</rptOwnerName></reportingOwnerId></reportingOwner>
      <reportingOwner><reportingOwnerId><rptOwnerName>B</rptOwnerName></reportingOwnerId></reportingOwner>
    </ownershipDocument>"""
    doc = parse_ownership_document(xml)
    assert [o.name for o in doc.reporting_owners] == ["A", "B"]
    assert [o.cik for o in doc.reporting_owners] == [None, None]
    assert doc.transactions == ()


def test_legacy_owner_field_names():
    xml = """<ownershipDocument>
      <reportingOwner><reportingOwnerId>
        <reportingOwnerCik>0000000042</reportingOwnerCik>
        <reportingOwnerName>LEGACY</reportingOwnerName>
      </reportingOwnerId></reportingOwner>
    </ownershipDocument>"""
    owner = parse_ownership_document(xml).reporting_owners[0]
    assert owner.name == "LEGACY"
    assert owner.cik == "0000000042"


def test_missing_sections_yield_empty_records():
    doc = parse_ownership_document("<ownershipDocument/>")

    assert doc.issuer.name is None
    assert doc.issuer.trading_symbol is None
    assert doc.reporting_owners == ()
    assert doc.transactions == ()
    assert doc.document_type is None


def test_unknown_root_is_tolerated():
    doc = parse_ownership_document("<somethingElse><issuer/></somethingElse>")
    assert doc.reporting_owners == ()
    assert doc.transactions == ()


def test_non_numeric_amounts_are_null():
    xml = """<ownershipDocument><nonDerivativeTable><nonDerivativeTransaction>
      <transactionCoding><transactionCode>P</transactionCode></transactionCoding>
      <transactionAmounts>
        <transactionShares><value>n/a</value></transactionShares>
        <transactionPricePerShare><value>10</value></transactionPricePerShare>
      </transactionAmounts>
    </nonDerivativeTransaction></nonDerivativeTable></ownershipDocument>"""
    txn = parse_ownership_document(xml).transactions[0]
    assert txn.shares is None
    assert txn.price_per_share == 10.0
    assert txn.total_value is None
    assert txn.acquired_disposed is None


@pytest.mark.parametrize("bad", ["", "<ownershipDocument>", "not xml at all"])
def test_malformed_xml_raises_parse_error(bad):
    with pytest.raises(ParseError):
        parse_ownership_document(bad)


def test_namespaced_tags_use_local_names():
    xml = '<o:ownershipDocument xmlns:o="urn:x"><o:documentType>4</o:documentType></o:ownershipDocument>'
    assert parse_ownership_document(xml).document_type == "4"


def test_mapping_helpers():
    m = xml_to_mapping('<r><a id="1">t</a><b/><b>2</b></r>')
    r = m["r"]

    assert r["a"] == {"@_id": "1", "#text": "t"}
    assert text_of(r["a"]) == "t"
    assert r["b"] == ["", "2"]
    assert text_of("") is None
    assert dig(r, "a", "missing", "deeper") is None
    assert dig(r, "nope") is None

    assert as_list(None) == []
    assert as_list("") == []
    assert as_list({"k": 1}) == [{"k": 1}]
    assert as_list([1, 2]) == [1, 2]


LATIN1_XML = """<?xml version="1.0" encoding="ISO-8859-1"?>
<ownershipDocument>
    <issuer><issuerName>Société Générale</issuerName></issuer>
    <reportingOwner>
        <reportingOwnerId><rptOwnerName>Muñoz José</rptOwnerName></reportingOwnerId>
    </reportingOwner>
</ownershipDocument>
""".encode("latin-1")


def test_declared_encoding_is_honoured_for_bytes():
    doc = parse_ownership_document(LATIN1_XML)

    assert doc.issuer.name == "Société Générale"
    assert doc.reporting_owners[0].name == "Muñoz José"


def test_decode_document_uses_declared_encoding():
    text = decode_document(LATIN1_XML)
    assert "Muñoz José" in text
    assert "\ufffd" not in text


@pytest.mark.parametrize(
    "content",
    [
        "<a>Muñoz</a>".encode("utf-8"),
        '<?xml version="1.0"?><a>Muñoz</a>'.encode("utf-8"),
        '<?xml version="1.0" encoding="no-such-codec"?><a>Muñoz</a>'.encode("utf-8"),
    ],
)
def test_decode_document_defaults_to_utf8(content):
    assert "Muñoz" in decode_document(content)


def test_inner_whitespace_is_kept():
    xml = """<ownershipDocument><nonDerivativeTable><nonDerivativeTransaction>
      <securityTitle><value>  Class  A\n Common </value></securityTitle>
    </nonDerivativeTransaction></nonDerivativeTable></ownershipDocument>"""
    txn = parse_ownership_document(xml).transactions[0]
    assert txn.security_title == "Class  A\n Common"


def test_attribute_bearing_value_leaves():
    xml = """<ownershipDocument><nonDerivativeTable><nonDerivativeTransaction>
      <securityTitle><value lang="en"> Series  B  Preferred </value></securityTitle>
      <transactionCoding><transactionCode id="c1">P</transactionCode></transactionCoding>
      <transactionAmounts>
        <transactionShares><value unit="sh"> 250 </value></transactionShares>
        <transactionPricePerShare><value currency="USD">4.5</value></transactionPricePerShare>
      </transactionAmounts>
    </nonDerivativeTransaction></nonDerivativeTable></ownershipDocument>"""
    txn = parse_ownership_document(xml).transactions[0]

    assert txn.security_title == "Series  B  Preferred"
    assert txn.transaction_code == "P"
    assert txn.shares == 250.0
    assert txn.price_per_share == 4.5
    assert txn.total_value == 1125.0
