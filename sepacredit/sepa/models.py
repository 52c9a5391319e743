"""Value objects for credit-transfer batches."""

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

# Unstructured remittance information allows a single line of 140 chars
DESCRIPTION_MAX_LENGTH = 140

AMOUNT_PATTERN = re.compile(r"\d+(?:\.\d{1,2})?", re.ASCII)

# Anything outside the XML 1.0 Char production
XML_ILLEGAL_CHARS = re.compile(r"[^\t\n\r\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")

CENT = Decimal("0.01")


def parse_amount(value: str) -> Decimal | None:
    """Parse a non-negative amount with at most 2 decimals.

    Only strings are accepted, so a binary float never reaches the total.

    Args:
        value: Amount such as "100", "0.5" or "1234.56"

    Returns:
        Decimal if the format is valid, None otherwise

    Example:
        >>> parse_amount("15.51")
        Decimal('15.51')
        >>> parse_amount("1,50") is None
        True
    """
    if not isinstance(value, str) or not AMOUNT_PATTERN.fullmatch(value):
        return None
    return Decimal(value)


def format_amount(amount: Decimal) -> str:
    """Format with exactly 2 decimals, '.' separator, no grouping.

    >>> format_amount(Decimal("15.5"))
    '15.50'
    """
    return f"{amount.quantize(CENT):f}"


def is_xml_text(value: str) -> bool:
    """True if ``value`` is a string that can be written as XML character data.

    >>> is_xml_text("Jan Jansen")
    True
    >>> is_xml_text("Jan\\x01Jansen")
    False
    """
    return isinstance(value, str) and XML_ILLEGAL_CHARS.search(value) is None


def truncate_description(description: str) -> str:
    """Cut the remittance text to 140 characters."""
    return description[:DESCRIPTION_MAX_LENGTH]


@dataclass(frozen=True)
class Transaction:
    """A single credit transfer, validated and normalized.

    Attributes:
        recipient: Creditor name (account holder)
        description: Remittance text, at most 140 characters
        amount: Exact amount, never a float
        creditor_address: Single postal address line
        creditor_country: Country of the creditor
        creditor_iban: Normalized creditor IBAN
        creditor_bic: Creditor BIC, uppercase
        execution_date: Requested execution date; None means render date
        currency: ISO 4217 currency code
    """

    recipient: str
    description: str
    amount: Decimal
    creditor_address: str
    creditor_country: str
    creditor_iban: str
    creditor_bic: str
    execution_date: date | None = None
    currency: str = "EUR"

    def requested_execution_date(self, fallback: date) -> date:
        """Execution date, or ``fallback`` when none was given."""
        return self.execution_date if self.execution_date is not None else fallback
