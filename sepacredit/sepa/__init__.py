"""SEPA credit-transfer batches (pain.001.001.02)."""

from .batch import PaymentBatch, system_clock
from .models import DESCRIPTION_MAX_LENGTH, Transaction, format_amount, parse_amount
from .xml_builder import ROOT_ELEMENT, GroupHeader, build_document

__all__ = [
    "DESCRIPTION_MAX_LENGTH",
    "GroupHeader",
    "PaymentBatch",
    "ROOT_ELEMENT",
    "Transaction",
    "build_document",
    "format_amount",
    "parse_amount",
    "system_clock",
]
