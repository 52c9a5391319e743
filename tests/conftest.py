"""
Pytest configuration and global fixtures.

This module provides shared fixtures used across all tests.
"""

import itertools
from collections.abc import Callable
from datetime import datetime

import pytest
from sample_accounts import CREDITOR_IBAN, DEBTOR_IBAN, FIXED_NOW

from sepacredit.sepa import PaymentBatch
from sepacredit.utils.config import Settings


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def sequential_ids() -> Callable[[], str]:
    """Message id factory producing MSG0001, MSG0002, ..."""
    counter = itertools.count(1)
    return lambda: f"MSG{next(counter):04d}"


@pytest.fixture
def settings() -> Settings:
    return Settings(default_currency="EUR", pretty_print=True)


@pytest.fixture
def batch(fixed_clock, sequential_ids, settings) -> PaymentBatch:
    """Empty batch for the ABN AMRO debtor account."""
    return PaymentBatch(
        DEBTOR_IBAN,
        clock=fixed_clock,
        id_factory=sequential_ids,
        settings=settings,
    )


@pytest.fixture
def add_payment(batch) -> Callable[..., PaymentBatch]:
    """Add a transaction with sensible defaults; keyword overrides allowed."""

    def _add(**overrides) -> PaymentBatch:
        kwargs = {
            "recipient": "Jan Jansen",
            "description": "Invoice 2026-001",
            "amount": "100.00",
            "creditor_address": "Dorpsstraat 1, Utrecht",
            "creditor_country": "NL",
            "creditor_iban": CREDITOR_IBAN,
        }
        kwargs.update(overrides)
        return batch.add_transaction(**kwargs)

    return _add
