"""OFX document generation.

Statements are assembled from ofxtools aggregates, which validate field
types, lengths and enumerations, then serialized behind an OFX header.
"""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime

from ofxtools.header import OFXHeaderV1, make_header
from ofxtools.models import (
    BANKACCTFROM,
    BANKMSGSRSV1,
    BANKTRANLIST,
    CCACCTFROM,
    CCSTMTRS,
    CCSTMTTRNRS,
    CREDITCARDMSGSRSV1,
    FI,
    LEDGERBAL,
    OFX,
    SIGNONMSGSRSV1,
    SONRS,
    STATUS,
    STMTRS,
    STMTTRN,
    STMTTRNRS,
)
from ofxtools.utils import UTC

from .config import OfxConfig
from .statement import Statement, Transaction

logger = logging.getLogger(__name__)

# OFX 1.x field limits
ACCTID_LENGTH = 22
BANKID_LENGTH = 9
NAME_LENGTH = 32
MEMO_LENGTH = 255


def _ok_status() -> STATUS:
    return STATUS(code=0, severity="INFO")


def _stmttrn(transaction: Transaction) -> STMTTRN:
    description = " ".join(transaction.description.split())
    return STMTTRN(
        trntype=transaction.trntype,
        dtposted=transaction.posted,
        trnamt=transaction.amount,
        fitid=transaction.fitid,
        name=description[:NAME_LENGTH] or None,
        memo=description[:MEMO_LENGTH] or None,
    )


def build_ofx_model(
    statement: Statement,
    config: OfxConfig | None = None,
    now: datetime | None = None,
) -> OFX:
    """Assemble the OFX aggregate tree for a statement.

    Args:
        statement: Statement to export
        config: Output options; defaults to a BRL credit card statement
        now: Server timestamp, defaults to the current UTC time

    Returns:
        OFX: Root aggregate with the signon and statement message sets
    """
    config = config or OfxConfig()
    now = now or datetime.now(UTC)

    sonrs = SONRS(
        status=_ok_status(),
        dtserver=now,
        language=config.language,
        fi=FI(org=statement.institution),
    )
    signonmsgs = SIGNONMSGSRSV1(sonrs=sonrs)

    banktranlist = BANKTRANLIST(
        *(_stmttrn(t) for t in statement.transactions),
        dtstart=statement.start,
        dtend=statement.end,
    )
    ledgerbal = LEDGERBAL(balamt=statement.balance, dtasof=statement.end)
    acctid = statement.account_id[:ACCTID_LENGTH]

    if config.account_type == "CREDITCARD":
        ccstmtrs = CCSTMTRS(
            curdef=config.currency,
            ccacctfrom=CCACCTFROM(acctid=acctid),
            banktranlist=banktranlist,
            ledgerbal=ledgerbal,
        )
        trnrs = CCSTMTTRNRS(trnuid="0", status=_ok_status(), ccstmtrs=ccstmtrs)
        return OFX(
            signonmsgsrsv1=signonmsgs,
            creditcardmsgsrsv1=CREDITCARDMSGSRSV1(trnrs),
        )

    stmtrs = STMTRS(
        curdef=config.currency,
        bankacctfrom=BANKACCTFROM(
            bankid=statement.institution[:BANKID_LENGTH],
            acctid=acctid,
            accttype=config.account_type,
        ),
        banktranlist=banktranlist,
        ledgerbal=ledgerbal,
    )
    trnrs = STMTTRNRS(trnuid="0", status=_ok_status(), stmtrs=stmtrs)
    return OFX(signonmsgsrsv1=signonmsgs, bankmsgsrsv1=BANKMSGSRSV1(trnrs))


def build_ofx(
    statement: Statement,
    config: OfxConfig | None = None,
    now: datetime | None = None,
) -> str:
    """Render a statement as an OFX document (header and indented body)."""
    config = config or OfxConfig()
    ofx = build_ofx_model(statement, config, now)

    root = ofx.to_etree()
    ET.indent(root)
    body = ET.tostring(root, encoding="unicode")
    if config.version < 200:
        # The body is written as UTF-8, which OFX 1.x declares as UNICODE/NONE
        header = str(
            OFXHeaderV1(version=config.version, encoding="UNICODE", charset="NONE")
        )
    else:
        header = str(make_header(version=config.version))

    logger.debug(
        f"Built OFX {config.version} {config.account_type} statement with "
        f"{len(statement.transactions)} transactions"
    )
    return header + body
