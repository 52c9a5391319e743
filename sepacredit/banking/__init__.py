"""IBAN/BIC validation and BIC derivation."""

from .identifiers import (
    compute_check_digits,
    normalize_bic,
    normalize_iban,
    resolve_routing_code,
    validate_checksum,
    validate_routing_code_shape,
)
from .routing_table import BANK_CODE_TO_BIC, lookup_bic, supported_bank_codes

__all__ = [
    "BANK_CODE_TO_BIC",
    "compute_check_digits",
    "lookup_bic",
    "normalize_bic",
    "normalize_iban",
    "resolve_routing_code",
    "supported_bank_codes",
    "validate_checksum",
    "validate_routing_code_shape",
]
