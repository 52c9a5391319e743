"""sepacredit - SEPA credit-transfer batch files with IBAN/BIC validation."""

from sepacredit.banking import resolve_routing_code, validate_checksum, validate_routing_code_shape
from sepacredit.sepa import PaymentBatch, Transaction

__version__ = "0.1.0"
__all__ = [
    "PaymentBatch",
    "Transaction",
    "resolve_routing_code",
    "validate_checksum",
    "validate_routing_code_shape",
]
