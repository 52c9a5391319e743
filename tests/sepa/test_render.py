"""Tests for pain.001.001.02 document rendering."""

from datetime import date, datetime
from decimal import Decimal

import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st
from lxml import etree
from sample_accounts import CREDITOR_IBAN, DEBTOR_BIC, DEBTOR_IBAN, FIXED_NOW

from sepacredit.exceptions import EmptyBatch
from sepacredit.sepa.batch import PaymentBatch
from sepacredit.sepa.xml_builder import ROOT_ELEMENT, end_to_end_id
from sepacredit.utils.config import Settings

pytestmark = pytest.mark.integration

GROUP_HEADER_ORDER = ["MsgId", "CreDtTm", "NbOfTxs", "CtrlSum", "Grpg"]
PAYMENT_INFO_ORDER = [
    "PmtMtd",
    "PmtTpInf",
    "ReqdExctnDt",
    "DbtrAcct",
    "DbtrAgt",
    "ChrgBr",
    "CdtTrfTxInf",
]
TRANSFER_INFO_ORDER = ["PmtId", "Amt", "CdtrAgt", "Cdtr", "CdtrAcct", "RmtInf"]


def parse(batch: PaymentBatch) -> etree._Element:
    return etree.fromstring(batch.render_bytes())


def child_tags(element: etree._Element) -> list[str]:
    return [child.tag for child in element]


def new_batch() -> PaymentBatch:
    return PaymentBatch(
        DEBTOR_IBAN,
        clock=lambda: FIXED_NOW,
        id_factory=lambda: "MSG0001",
        settings=Settings(default_currency="EUR"),
    )


class TestRenderExample:
    """ABN AMRO debtor paying one Rabobank creditor."""

    def test_single_transaction_document(self, batch, add_payment):
        add_payment(amount="100.00", currency="EUR")

        root = parse(batch)

        assert root.tag == ROOT_ELEMENT == "pain.001.001.02"
        assert len(root.findall("PmtInf")) == 1
        assert root.findtext("GrpHdr/CtrlSum") == "100.00"
        assert root.findtext("GrpHdr/NbOfTxs") == "1"
        assert root.findtext("PmtInf/DbtrAgt/FinInstnId/BIC") == "ABNANL2A"
        assert root.findtext("PmtInf/CdtTrfTxInf/CdtrAgt/FinInstnId/BIC") == "RABONL2U"

    def test_group_header(self, batch, add_payment):
        add_payment()

        header = parse(batch).find("GrpHdr")

        assert child_tags(header) == GROUP_HEADER_ORDER
        assert header.findtext("MsgId") == "MSG0001"
        assert header.findtext("CreDtTm") == "2026-10-18T09:30:00+02:00"
        assert header.findtext("Grpg") == "SNGL"

    def test_payment_block(self, batch, add_payment):
        add_payment(
            recipient="Jan Jansen",
            description="Invoice 2026-001",
            amount="42.5",
            creditor_address="Dorpsstraat 1, Utrecht",
            creditor_country="NL",
        )

        block = parse(batch).find("PmtInf")

        assert child_tags(block) == PAYMENT_INFO_ORDER
        assert block.findtext("PmtMtd") == "TRF"
        assert block.findtext("PmtTpInf/SvcLvl/Cd") == "SEPA"
        assert block.findtext("ReqdExctnDt") == "2026-10-18"
        assert block.findtext("DbtrAcct/Id/IBAN") == DEBTOR_IBAN
        assert block.findtext("DbtrAcct/Ccy") == "EUR"
        assert block.findtext("DbtrAgt/FinInstnId/BIC") == DEBTOR_BIC
        assert block.findtext("ChrgBr") == "SLEV"

        transfer = block.find("CdtTrfTxInf")
        assert child_tags(transfer) == TRANSFER_INFO_ORDER
        assert transfer.findtext("PmtId/EndToEndId") == "MSG0001-1"
        amount = transfer.find("Amt/InstdAmt")
        assert amount.text == "42.50"
        assert amount.get("Ccy") == "EUR"
        assert transfer.findtext("Cdtr/Nm") == "Jan Jansen"
        assert transfer.findtext("Cdtr/PstlAdr/AdrLine") == "Dorpsstraat 1, Utrecht"
        assert transfer.findtext("Cdtr/PstlAdr/Ctry") == "NL"
        assert transfer.findtext("CdtrAcct/Id/IBAN") == CREDITOR_IBAN
        assert transfer.findtext("RmtInf/Ustrd") == "Invoice 2026-001"

    def test_explicit_execution_date_and_currency(self, batch, add_payment):
        add_payment(execution_date=date(2026, 12, 24), currency="USD")

        block = parse(batch).find("PmtInf")

        assert block.findtext("ReqdExctnDt") == "2026-12-24"
        assert block.findtext("DbtrAcct/Ccy") == "USD"
        assert block.find("CdtTrfTxInf/Amt/InstdAmt").get("Ccy") == "USD"

    def test_creditor_bic_emitted_uppercase(self, batch, add_payment):
        add_payment(creditor_bic="rabonl2uxxx")

        assert parse(batch).findtext("PmtInf/CdtTrfTxInf/CdtrAgt/FinInstnId/BIC") == "RABONL2UXXX"

    def test_description_truncated_in_document(self, batch, add_payment):
        add_payment(description="d" * 150)
        add_payment(description="short text")

        remittances = [el.text for el in parse(batch).iter("Ustrd")]

        assert len(remittances[0]) == 140
        assert remittances[1] == "short text"

    def test_special_characters_escaped(self, batch, add_payment):
        add_payment(recipient="Jansen & Zn <B.V.>", description="Café \"crème\"")

        root = parse(batch)

        assert root.findtext("PmtInf/CdtTrfTxInf/Cdtr/Nm") == "Jansen & Zn <B.V.>"
        assert root.findtext("PmtInf/CdtTrfTxInf/RmtInf/Ustrd") == "Café \"crème\""


class TestControlSum:
    def test_exact_decimal_sum(self, batch, add_payment):
        for amount in ["10.00", "0.01", "5.50"]:
            add_payment(amount=amount)

        root = parse(batch)

        assert batch.total == Decimal("15.51")
        assert root.findtext("GrpHdr/CtrlSum") == "15.51"
        assert root.findtext("GrpHdr/NbOfTxs") == "3"

    def test_many_cents_do_not_drift(self, batch, add_payment):
        for _ in range(1000):
            add_payment(amount="0.10")

        assert parse(batch).findtext("GrpHdr/CtrlSum") == "100.00"

    @settings(max_examples=50, deadline=None)
    @given(
        amounts=st.lists(
            st.decimals(min_value=0, max_value=1_000_000, places=2).map(abs),
            min_size=1,
            max_size=15,
        )
    )
    def test_control_sum_matches_amounts(self, amounts):
        assume(sum(amounts) > 0)
        batch = new_batch()
        for amount in amounts:
            batch.add_transaction(
                recipient="Creditor",
                description="Payment",
                amount=f"{amount:f}",
                creditor_address="Dorpsstraat 1",
                creditor_country="NL",
                creditor_iban=CREDITOR_IBAN,
            )

        root = parse(batch)

        assert Decimal(root.findtext("GrpHdr/CtrlSum")) == sum(amounts)
        instructed = [Decimal(el.text) for el in root.iter("InstdAmt")]
        assert instructed == amounts
        assert sum(instructed) == Decimal(root.findtext("GrpHdr/CtrlSum"))


class TestOrdering:
    def test_insertion_order_is_document_order(self, batch, add_payment):
        add_payment(recipient="A")
        add_payment(recipient="B")

        names = [el.text for el in parse(batch).iter("Nm")]

        assert names == ["A", "B"]

    def test_reversed_insertion_reverses_document(self, batch, add_payment):
        add_payment(recipient="B")
        add_payment(recipient="A")

        names = [el.text for el in parse(batch).iter("Nm")]

        assert names == ["B", "A"]

    @settings(max_examples=30, deadline=None)
    @given(order=st.permutations(range(6)))
    def test_any_permutation_preserved(self, order):
        batch = new_batch()
        for index in order:
            batch.add_transaction(
                recipient=f"Creditor {index}",
                description=f"Payment {index}",
                amount=f"{index + 1}.00",
                creditor_address="Dorpsstraat 1",
                creditor_country="NL",
                creditor_iban=CREDITOR_IBAN,
            )

        root = parse(batch)

        assert [el.text for el in root.iter("Nm")] == [f"Creditor {i}" for i in order]
        assert [el.text for el in root.iter("Ustrd")] == [f"Payment {i}" for i in order]

    def test_end_to_end_ids_unique(self, batch, add_payment):
        for _ in range(3):
            add_payment()

        ids = [el.text for el in parse(batch).iter("EndToEndId")]

        assert ids == ["MSG0001-1", "MSG0001-2", "MSG0001-3"]

    def test_end_to_end_id_fits_schema_length(self):
        assert len(end_to_end_id("f" * 32, 123456)) <= 35


class TestRoundTrip:
    def test_parsed_document_recovers_inputs(self, batch, add_payment):
        inputs = [
            ("NL39RABO0300065264", None, "RABONL2U", "250.00"),
            ("NL91ABNA0417164300", "ABNANL2A", "ABNANL2A", "0.99"),
            ("GB82WEST12345698765432", "NWBKGB2L", "NWBKGB2L", "1000.00"),
        ]
        for iban, bic, _, amount in inputs:
            add_payment(creditor_iban=iban, creditor_bic=bic, amount=amount)

        root = parse(batch)
        blocks = root.findall("PmtInf")

        assert root.findtext("GrpHdr/NbOfTxs") == str(len(inputs))
        assert root.findtext("GrpHdr/CtrlSum") == "1250.99"
        for block, (iban, _, expected_bic, amount) in zip(blocks, inputs, strict=True):
            assert block.findtext("CdtTrfTxInf/CdtrAcct/Id/IBAN") == iban
            assert block.findtext("CdtTrfTxInf/CdtrAgt/FinInstnId/BIC") == expected_bic
            assert block.findtext("CdtTrfTxInf/Amt/InstdAmt") == amount


class TestSerialization:
    def test_declaration_and_encoding(self, batch, add_payment):
        add_payment()

        document = batch.render_bytes()

        assert document.startswith(b"<?xml version='1.0' encoding='UTF-8'?>")

    def test_pretty_printed(self, batch, add_payment):
        add_payment()

        document = batch.render()

        assert "\n  <GrpHdr>\n    <MsgId>" in document
        assert document.endswith("</pain.001.001.02>\n")

    def test_compact_output_when_disabled(self, fixed_clock):
        batch = PaymentBatch(
            DEBTOR_IBAN, clock=fixed_clock, settings=Settings(pretty_print=False)
        )
        batch.add_transaction(
            recipient="Jan",
            description="x",
            amount="1.00",
            creditor_address="Dorpsstraat 1",
            creditor_country="NL",
            creditor_iban=CREDITOR_IBAN,
        )

        assert "\n  <GrpHdr>" not in batch.render()

    def test_render_matches_render_bytes(self, batch, add_payment):
        add_payment()

        text = batch.render()

        assert isinstance(text, str)
        assert text.startswith("<?xml")
        assert "<IBAN>NL91ABNA0417164300</IBAN>" in text

    def test_non_ascii_encoded_as_utf8(self, batch, add_payment):
        add_payment(recipient="Zoë Müller")

        assert "Zoë Müller".encode() in batch.render_bytes()


class TestRenderFailures:
    def test_empty_batch(self, batch):
        with pytest.raises(EmptyBatch) as exc_info:
            batch.render()

        assert exc_info.value.context["transaction_count"] == 0

    def test_zero_total(self, batch, add_payment):
        add_payment(amount="0.00")
        add_payment(amount="0")

        with pytest.raises(EmptyBatch):
            batch.render()

    def test_no_id_consumed_on_failure(self, batch, add_payment):
        """Failure happens before any header value is produced."""
        with pytest.raises(EmptyBatch):
            batch.render()

        add_payment()

        assert parse(batch).findtext("GrpHdr/MsgId") == "MSG0001"


class TestRepeatedRender:
    def test_header_recomputed_each_call(self, add_payment, batch):
        add_payment()

        first = parse(batch)
        second = parse(batch)

        assert first.findtext("GrpHdr/MsgId") == "MSG0001"
        assert second.findtext("GrpHdr/MsgId") == "MSG0002"
        assert len(second.findall("GrpHdr")) == 1
        assert len(second.findall("PmtInf")) == 1

    def test_render_does_not_modify_batch(self, add_payment, batch):
        add_payment(amount="7.25")
        before = batch.transactions

        batch.render()
        batch.render()

        assert batch.transactions == before
        assert batch.total == Decimal("7.25")

    def test_fresh_timestamp_each_call(self):
        times = iter(
            [
                datetime.fromisoformat("2026-10-18T09:30:00+02:00"),
                datetime.fromisoformat("2026-10-19T08:00:00+02:00"),
            ]
        )
        batch = PaymentBatch(DEBTOR_IBAN, clock=lambda: next(times))
        batch.add_transaction(
            recipient="Jan",
            description="x",
            amount="1.00",
            creditor_address="Dorpsstraat 1",
            creditor_country="NL",
            creditor_iban=CREDITOR_IBAN,
        )

        first = parse(batch)
        second = parse(batch)

        assert first.findtext("GrpHdr/CreDtTm") == "2026-10-18T09:30:00+02:00"
        assert second.findtext("GrpHdr/CreDtTm") == "2026-10-19T08:00:00+02:00"
        assert first.findtext("PmtInf/ReqdExctnDt") == "2026-10-18"
        assert second.findtext("PmtInf/ReqdExctnDt") == "2026-10-19"

    def test_naive_clock_gets_offset(self):
        batch = PaymentBatch(DEBTOR_IBAN, clock=lambda: datetime(2026, 1, 1, 12, 0))
        batch.add_transaction(
            recipient="Jan",
            description="x",
            amount="1.00",
            creditor_address="Dorpsstraat 1",
            creditor_country="NL",
            creditor_iban=CREDITOR_IBAN,
        )

        created = datetime.fromisoformat(parse(batch).findtext("GrpHdr/CreDtTm"))

        assert created.tzinfo is not None

    def test_default_message_id_is_unique(self):
        batch = PaymentBatch(DEBTOR_IBAN)
        batch.add_transaction(
            recipient="Jan",
            description="x",
            amount="1.00",
            creditor_address="Dorpsstraat 1",
            creditor_country="NL",
            creditor_iban=CREDITOR_IBAN,
        )

        ids = {parse(batch).findtext("GrpHdr/MsgId") for _ in range(5)}

        assert len(ids) == 5
        assert all(len(msg_id) <= 35 for msg_id in ids)
