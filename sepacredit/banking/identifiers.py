"""IBAN and BIC validation, and BIC derivation from an IBAN.

All functions are pure. Validators return booleans and never raise for
malformed input; ``resolve_routing_code`` raises ``RoutingLookupFailed``
so callers can translate it into the error kind that fits their context.
"""

import re

from sepacredit.banking.routing_table import lookup_bic
from sepacredit.exceptions import RoutingLookupFailed
from sepacredit.utils.logging import get_logger, mask_iban

logger = get_logger(__name__)

# Country code + check digits, then an alphanumeric body
IBAN_PATTERN = re.compile(r"^[A-Z]{2}[0-9]{2}[A-Z0-9]+$")

# Institution (4) + country (2) + location (2) + optional branch (3)
BIC_PATTERN = re.compile(r"^[A-Z]{4}[A-Z]{2}[0-9A-Z]{2}(?:[0-9A-Z]{3})?$", re.IGNORECASE)

# Bank code sits right after "CCdd"
BANK_CODE_PATTERN = re.compile(r"^.{4}([A-Z]{4})")

_WHITESPACE = re.compile(r"\s+")


def normalize_iban(value: str) -> str:
    """Remove all whitespace and uppercase.

    >>> normalize_iban("nl91 abna 0417 1643 00")
    'NL91ABNA0417164300'
    """
    return _WHITESPACE.sub("", value).upper()


def normalize_bic(value: str) -> str:
    """Remove all whitespace and uppercase."""
    return _WHITESPACE.sub("", value).upper()


def _to_digits(value: str) -> str:
    # A=10 ... Z=35; int(c, 36) does exactly that for letters and keeps digits
    return "".join(str(int(char, 36)) for char in value)


def validate_checksum(identifier: str) -> bool:
    """Validate an IBAN with the ISO 7064 mod-97-10 checksum.

    The first four characters (country code and check digits) are moved to
    the end, letters are replaced by their two-digit values (A=10 ... Z=35),
    and the resulting integer must leave remainder 1 when divided by 97.
    Python integers are arbitrary precision, so the 30+ digit number is
    never truncated.

    Args:
        identifier: IBAN, any case, whitespace allowed

    Returns:
        True if the checksum holds, False otherwise (including malformed input)

    Example:
        >>> validate_checksum("NL91ABNA0417164300")
        True
        >>> validate_checksum("NL92ABNA0417164300")
        False
    """
    if not isinstance(identifier, str):
        return False

    iban = normalize_iban(identifier)
    if not IBAN_PATTERN.match(iban):
        return False

    rearranged = iban[4:] + iban[:4]
    return int(_to_digits(rearranged)) % 97 == 1


def compute_check_digits(country_code: str, bban: str) -> str:
    """Compute the two IBAN check digits for a country code and BBAN.

    Example:
        >>> compute_check_digits("NL", "ABNA0417164300")
        '91'
    """
    country_code = country_code.upper()
    bban = normalize_iban(bban)
    remainder = int(_to_digits(bban + country_code + "00")) % 97
    return f"{98 - remainder:02d}"


def validate_routing_code_shape(code: str) -> bool:
    """Check that a BIC has a valid shape (not that it is registered).

    Whitespace anywhere in the value is ignored; case does not matter.

    Example:
        >>> validate_routing_code_shape("ABNANL2A")
        True
        >>> validate_routing_code_shape("rabo nl 2u xxx")
        True
        >>> validate_routing_code_shape("ABNANL2")
        False
    """
    if not isinstance(code, str):
        return False
    return BIC_PATTERN.match(_WHITESPACE.sub("", code)) is not None


def resolve_routing_code(identifier: str) -> str:
    """Derive the BIC for an IBAN from its embedded bank code.

    Args:
        identifier: IBAN, any case, whitespace allowed

    Returns:
        BIC as stored in the routing table

    Raises:
        RoutingLookupFailed: No 4-letter bank code at offset 4, or the code
            is not in the routing table

    Example:
        >>> resolve_routing_code("NL91ABNA0417164300")
        'ABNANL2A'
    """
    iban = normalize_iban(identifier)

    match = BANK_CODE_PATTERN.match(iban)
    if not match:
        logger.warning("bank_code_not_found", iban=iban)
        raise RoutingLookupFailed(
            f"No bank code found in IBAN: {mask_iban(iban)}", iban=mask_iban(iban)
        )

    bank_code = match.group(1)
    bic = lookup_bic(bank_code)
    if bic is None:
        logger.warning("bank_code_unknown", iban=iban, bank_code=bank_code)
        raise RoutingLookupFailed(
            f"Could not find BIC for bank code {bank_code}",
            iban=mask_iban(iban),
            bank_code=bank_code,
        )

    logger.debug("bic_resolved", iban=iban, bank_code=bank_code, bic=bic)
    return bic
