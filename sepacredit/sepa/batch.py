"""Credit-transfer batch builder.

A ``PaymentBatch`` holds one debtor, an ordered list of transactions and the
running total. Every input is validated on the way in, so ``render`` only
has to check that there is something to pay.

Example:
    >>> batch = PaymentBatch("NL91ABNA0417164300")
    >>> batch.add_transaction(
    ...     recipient="Jan Jansen",
    ...     description="Invoice 2024-001",
    ...     amount="100.00",
    ...     creditor_address="Dorpsstraat 1, Utrecht",
    ...     creditor_country="NL",
    ...     creditor_iban="NL39RABO0300065264",
    ... ).render()  # doctest: +SKIP
"""

import uuid
from collections.abc import Callable
from datetime import date, datetime
from decimal import Decimal

from sepacredit.banking.identifiers import (
    normalize_bic,
    normalize_iban,
    resolve_routing_code,
    validate_checksum,
    validate_routing_code_shape,
)
from sepacredit.exceptions import (
    CreditorRoutingUnresolved,
    DebtorRoutingUnresolved,
    EmptyBatch,
    InvalidAmountFormat,
    InvalidCreditorIdentifier,
    InvalidCreditorRoutingCode,
    InvalidDebtorIdentifier,
    InvalidDebtorRoutingCode,
    InvalidTextField,
    RoutingLookupFailed,
    wrap_exception,
)
from sepacredit.sepa.models import (
    Transaction,
    format_amount,
    is_xml_text,
    parse_amount,
    truncate_description,
)
from sepacredit.sepa.xml_builder import GroupHeader, build_document, serialize
from sepacredit.utils.config import Settings, get_settings
from sepacredit.utils.logging import LogPerformance, get_logger, mask_iban

logger = get_logger(__name__)

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]


def system_clock() -> datetime:
    """Current local time, timezone-aware."""
    return datetime.now().astimezone()


def uuid_message_id() -> str:
    return uuid.uuid4().hex


def _masked(value: object) -> object:
    # Exception text never carries a full account number
    return mask_iban(value) if isinstance(value, str) else value


class PaymentBatch:
    """Accumulates credit transfers for one debtor and renders pain.001.

    Args:
        debtor_iban: Debtor IBAN (validated with mod-97)
        debtor_bic: Debtor BIC; derived from the IBAN when omitted
        clock: Time source for the creation timestamp and default dates
        id_factory: Produces the message identification of each render
        settings: Settings override (defaults to ``get_settings()``)

    Raises:
        InvalidDebtorIdentifier: IBAN checksum failed
        InvalidDebtorRoutingCode: Supplied BIC has an invalid shape
        DebtorRoutingUnresolved: BIC omitted and not derivable
    """

    def __init__(
        self,
        debtor_iban: str,
        debtor_bic: str | None = None,
        *,
        clock: Clock | None = None,
        id_factory: IdFactory | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._clock = clock or system_clock
        self._id_factory = id_factory or uuid_message_id

        if not validate_checksum(debtor_iban):
            logger.warning("debtor_iban_invalid", iban=str(debtor_iban))
            raise InvalidDebtorIdentifier(
                f"IBAN number is wrong: {_masked(debtor_iban)}",
                field="debtor_iban",
                value=_masked(debtor_iban),
                constraint="mod97",
            )
        iban = normalize_iban(debtor_iban)

        if debtor_bic:
            if not validate_routing_code_shape(debtor_bic):
                logger.warning("debtor_bic_invalid", bic=debtor_bic)
                raise InvalidDebtorRoutingCode(
                    f"BIC number is wrong: {debtor_bic}",
                    field="debtor_bic",
                    value=debtor_bic,
                    constraint="bic_shape",
                )
            bic = normalize_bic(debtor_bic)
        else:
            try:
                bic = resolve_routing_code(iban)
            except RoutingLookupFailed as e:
                raise wrap_exception(
                    e,
                    "Debtor BIC is not given and could not be derived from the IBAN",
                    exception_class=DebtorRoutingUnresolved,
                    iban=mask_iban(iban),
                    bank_code=e.context.get("bank_code"),
                ) from e

        self._debtor_iban = iban
        self._debtor_bic = bic.upper()
        self._transactions: list[Transaction] = []
        self._total = Decimal("0")

        logger.info("payment_batch_created", debtor_iban=iban, debtor_bic=self._debtor_bic)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def debtor_iban(self) -> str:
        return self._debtor_iban

    @property
    def debtor_bic(self) -> str:
        return self._debtor_bic

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        """Transactions in insertion order."""
        return tuple(self._transactions)

    @property
    def total(self) -> Decimal:
        """Exact sum of all transaction amounts."""
        return self._total

    @property
    def transaction_count(self) -> int:
        return len(self._transactions)

    def __len__(self) -> int:
        return len(self._transactions)

    def __repr__(self) -> str:
        return (
            f"PaymentBatch(debtor_iban={self._debtor_iban!r}, "
            f"transactions={len(self._transactions)}, total={format_amount(self._total)})"
        )

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_transaction(
        self,
        recipient: str,
        description: str,
        amount: str,
        creditor_address: str,
        creditor_country: str,
        creditor_iban: str,
        creditor_bic: str | None = None,
        execution_date: date | None = None,
        currency: str | None = None,
    ) -> "PaymentBatch":
        """Validate and append a credit transfer.

        Checks run in order and stop at the first failure; the batch is left
        untouched when any check fails.

        Args:
            recipient: Creditor name
            description: Remittance text, cut to 140 characters
            amount: Amount as a string, e.g. "100.00"
            creditor_address: Single postal address line
            creditor_country: Creditor country code
            creditor_iban: Creditor IBAN
            creditor_bic: Creditor BIC; derived from the IBAN when omitted
            execution_date: Requested execution date; render date when omitted
            currency: ISO 4217 code; settings default ("EUR") when omitted

        Returns:
            The batch itself, for chaining

        Raises:
            InvalidAmountFormat: Amount is not a string like "0.00"
            InvalidCreditorIdentifier: IBAN checksum failed
            InvalidCreditorRoutingCode: Supplied BIC has an invalid shape
            CreditorRoutingUnresolved: BIC omitted and not derivable
            InvalidTextField: A name, address, country or description is not
                text or contains characters XML cannot represent
        """
        parsed_amount = parse_amount(amount)
        if parsed_amount is None:
            logger.warning("transaction_amount_invalid", amount=repr(amount))
            raise InvalidAmountFormat(
                "Amount is not in expected format, should be 0.00",
                field="amount",
                value=amount,
                constraint=r"^\d+(\.\d{1,2})?$",
            )

        if not validate_checksum(creditor_iban):
            logger.warning("creditor_iban_invalid", iban=str(creditor_iban))
            raise InvalidCreditorIdentifier(
                f"IBAN number is wrong: {_masked(creditor_iban)}",
                field="creditor_iban",
                value=_masked(creditor_iban),
                constraint="mod97",
            )
        iban = normalize_iban(creditor_iban)

        if creditor_bic:
            if not validate_routing_code_shape(creditor_bic):
                logger.warning("creditor_bic_invalid", bic=creditor_bic)
                raise InvalidCreditorRoutingCode(
                    f"BIC number is wrong: {creditor_bic}",
                    field="creditor_bic",
                    value=creditor_bic,
                    constraint="bic_shape",
                )
            bic = normalize_bic(creditor_bic)
        else:
            try:
                bic = resolve_routing_code(iban)
            except RoutingLookupFailed as e:
                raise wrap_exception(
                    e,
                    f"BIC is not given and could not be derived for IBAN {mask_iban(iban)}",
                    exception_class=CreditorRoutingUnresolved,
                    iban=mask_iban(iban),
                    bank_code=e.context.get("bank_code"),
                ) from e

        for name, text in (
            ("recipient", recipient),
            ("description", description),
            ("creditor_address", creditor_address),
            ("creditor_country", creditor_country),
        ):
            if not is_xml_text(text):
                logger.warning("transaction_text_invalid", field=name)
                raise InvalidTextField(
                    f"{name} must be text without control characters",
                    field=name,
                    value=repr(text),
                    constraint="xml_char",
                )

        if isinstance(execution_date, datetime):
            execution_date = execution_date.date()

        transaction = Transaction(
            recipient=recipient,
            description=truncate_description(description),
            amount=parsed_amount,
            creditor_address=creditor_address,
            creditor_country=creditor_country,
            creditor_iban=iban,
            creditor_bic=bic,
            execution_date=execution_date,
            currency=(currency or self._settings.default_currency).upper(),
        )

        self._transactions.append(transaction)
        self._total += parsed_amount

        logger.info(
            "transaction_added",
            creditor_iban=iban,
            amount=format_amount(parsed_amount),
            currency=transaction.currency,
            transaction_count=len(self._transactions),
        )
        return self

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _check_renderable(self) -> None:
        if not self._transactions:
            logger.warning("render_rejected", reason="no_transactions")
            raise EmptyBatch("No transactions were given", transaction_count=0)
        if self._total == 0:
            logger.warning("render_rejected", reason="zero_total")
            raise EmptyBatch(
                "The total sum is 0",
                transaction_count=len(self._transactions),
            )

    def render_bytes(self) -> bytes:
        """Render the document as UTF-8 encoded bytes.

        Every call computes a fresh header (message id, timestamp); the
        batch itself is not modified.

        Raises:
            EmptyBatch: No transactions, or the total is zero
        """
        self._check_renderable()

        now = self._clock()
        if now.tzinfo is None:
            now = now.astimezone()

        header = GroupHeader(
            message_id=self._id_factory(),
            created_at=now,
            transaction_count=len(self._transactions),
            control_sum=self._total,
        )

        with LogPerformance(
            "document_render",
            logger,
            message_id=header.message_id,
            transaction_count=header.transaction_count,
            control_sum=format_amount(header.control_sum),
        ):
            root = build_document(
                header,
                self._transactions,
                debtor_iban=self._debtor_iban,
                debtor_bic=self._debtor_bic,
                render_date=now.date(),
            )
            return serialize(root, pretty_print=self._settings.pretty_print)

    def render(self) -> str:
        """Render the pain.001.001.02 document as a string.

        Raises:
            EmptyBatch: No transactions, or the total is zero
        """
        return self.render_bytes().decode("utf-8")
