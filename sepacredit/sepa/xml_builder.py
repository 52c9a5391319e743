"""pain.001.001.02 document writer.

Builds the element tree for a credit-transfer batch. Element order follows
the schema and must not change:

    pain.001.001.02
      GrpHdr (MsgId, CreDtTm, NbOfTxs, CtrlSum, Grpg)
      PmtInf (one per transaction)
        PmtMtd, PmtTpInf, ReqdExctnDt, DbtrAcct, DbtrAgt, ChrgBr, CdtTrfTxInf

The writer does no validation; ``PaymentBatch`` hands it checked data.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from lxml import etree

from sepacredit.sepa.models import Transaction, format_amount

ROOT_ELEMENT = "pain.001.001.02"

PAYMENT_METHOD_TRANSFER = "TRF"
SERVICE_LEVEL_SEPA = "SEPA"
CHARGE_BEARER_SERVICE_LEVEL = "SLEV"
GROUPING_SINGLE = "SNGL"

# EndToEndId is limited to 35 characters
_END_TO_END_PREFIX_LENGTH = 24


@dataclass(frozen=True)
class GroupHeader:
    """Aggregates written once at the top of the document."""

    message_id: str
    created_at: datetime
    transaction_count: int
    control_sum: Decimal
    grouping: str = GROUPING_SINGLE


def end_to_end_id(message_id: str, sequence: int) -> str:
    """Payment identification for the ``sequence``-th transaction (1-based)."""
    return f"{message_id[:_END_TO_END_PREFIX_LENGTH]}-{sequence}"


def _sub(parent: etree._Element, tag: str, text: str | None = None) -> etree._Element:
    element = etree.SubElement(parent, tag)
    if text is not None:
        element.text = text
    return element


def _add_group_header(root: etree._Element, header: GroupHeader) -> None:
    grp_hdr = _sub(root, "GrpHdr")
    _sub(grp_hdr, "MsgId", header.message_id)
    _sub(grp_hdr, "CreDtTm", header.created_at.isoformat(timespec="seconds"))
    _sub(grp_hdr, "NbOfTxs", str(header.transaction_count))
    _sub(grp_hdr, "CtrlSum", format_amount(header.control_sum))
    _sub(grp_hdr, "Grpg", header.grouping)


def _add_payment_info(
    root: etree._Element,
    transaction: Transaction,
    *,
    payment_id: str,
    debtor_iban: str,
    debtor_bic: str,
    render_date: date,
) -> None:
    pmt_inf = _sub(root, "PmtInf")
    _sub(pmt_inf, "PmtMtd", PAYMENT_METHOD_TRANSFER)

    pmt_tp_inf = _sub(pmt_inf, "PmtTpInf")
    _sub(_sub(pmt_tp_inf, "SvcLvl"), "Cd", SERVICE_LEVEL_SEPA)

    execution_date = transaction.requested_execution_date(render_date)
    _sub(pmt_inf, "ReqdExctnDt", execution_date.isoformat())

    dbtr_acct = _sub(pmt_inf, "DbtrAcct")
    _sub(_sub(dbtr_acct, "Id"), "IBAN", debtor_iban)
    _sub(dbtr_acct, "Ccy", transaction.currency)

    dbtr_agt = _sub(pmt_inf, "DbtrAgt")
    _sub(_sub(dbtr_agt, "FinInstnId"), "BIC", debtor_bic)

    _sub(pmt_inf, "ChrgBr", CHARGE_BEARER_SERVICE_LEVEL)

    tx_inf = _sub(pmt_inf, "CdtTrfTxInf")
    _sub(_sub(tx_inf, "PmtId"), "EndToEndId", payment_id)

    instd_amt = _sub(_sub(tx_inf, "Amt"), "InstdAmt", format_amount(transaction.amount))
    instd_amt.set("Ccy", transaction.currency)

    cdtr_agt = _sub(tx_inf, "CdtrAgt")
    _sub(_sub(cdtr_agt, "FinInstnId"), "BIC", transaction.creditor_bic.upper())

    cdtr = _sub(tx_inf, "Cdtr")
    _sub(cdtr, "Nm", transaction.recipient)
    pstl_adr = _sub(cdtr, "PstlAdr")
    _sub(pstl_adr, "AdrLine", transaction.creditor_address)
    _sub(pstl_adr, "Ctry", transaction.creditor_country)

    cdtr_acct = _sub(tx_inf, "CdtrAcct")
    _sub(_sub(cdtr_acct, "Id"), "IBAN", transaction.creditor_iban)

    _sub(_sub(tx_inf, "RmtInf"), "Ustrd", transaction.description)


def build_document(
    header: GroupHeader,
    transactions: Sequence[Transaction],
    *,
    debtor_iban: str,
    debtor_bic: str,
    render_date: date,
) -> etree._Element:
    """Build the document tree; transactions are written in the given order.

    Args:
        header: Group header aggregates
        transactions: Transactions in emission order
        debtor_iban: Normalized debtor IBAN
        debtor_bic: Uppercase debtor BIC
        render_date: Execution date for transactions without one

    Returns:
        Root element of the document
    """
    root = etree.Element(ROOT_ELEMENT)
    _add_group_header(root, header)

    for sequence, transaction in enumerate(transactions, start=1):
        _add_payment_info(
            root,
            transaction,
            payment_id=end_to_end_id(header.message_id, sequence),
            debtor_iban=debtor_iban,
            debtor_bic=debtor_bic,
            render_date=render_date,
        )

    return root


def serialize(root: etree._Element, pretty_print: bool = True) -> bytes:
    """Serialize to UTF-8 bytes with an XML declaration."""
    return etree.tostring(
        root,
        xml_declaration=True,
        encoding="UTF-8",
        pretty_print=pretty_print,
    )
