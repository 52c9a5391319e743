"""Exception hierarchy for sepacredit.

Every failure raised by the package is a subclass of ``SepaCreditError`` and
carries structured context for logging. Error kinds map one-to-one onto
exception classes so callers can catch exactly the failure they care about.

Usage:
    from sepacredit.exceptions import InvalidCreditorIdentifier

    try:
        batch.add_transaction(...)
    except InvalidCreditorIdentifier as e:
        logger.error("transaction_rejected", error=str(e), context=e.context)
"""

from __future__ import annotations

from typing import Any


class SepaCreditError(Exception):
    """Base exception for all sepacredit errors.

    Attributes:
        message: Human-readable error message
        context: Additional context for debugging (dict)
        original_error: Original exception if wrapped
    """

    def __init__(
        self,
        message: str,
        *,
        context: dict[str, Any] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_error = original_error

    def __str__(self) -> str:
        """Format exception with context for logging."""
        base = self.message
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base = f"{base} ({ctx_str})"
        if self.original_error:
            base = f"{base} [caused by: {type(self.original_error).__name__}]"
        return base

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"{self.__class__.__name__}(message={self.message!r}, context={self.context!r})"


# =============================================================================
# Validation & Input Errors
# =============================================================================


class ValidationError(SepaCreditError):
    """Raised when caller input is malformed."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        constraint: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize validation error.

        Args:
            message: Error description
            field: Name of the invalid field
            value: The invalid value (truncated in context)
            constraint: Validation constraint that was violated
            **kwargs: Additional context
        """
        context = kwargs.get("context", {})
        if field:
            context["field"] = field
        if value is not None:
            context["value"] = str(value)[:100]
        if constraint:
            context["constraint"] = constraint
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class InvalidDebtorIdentifier(ValidationError):
    """Debtor IBAN failed the mod-97 checksum."""


class InvalidCreditorIdentifier(ValidationError):
    """Creditor IBAN failed the mod-97 checksum."""


class InvalidAmountFormat(ValidationError):
    """Amount is not a non-negative decimal string with at most 2 decimals."""


class InvalidCreditorRoutingCode(ValidationError):
    """Supplied creditor BIC does not have a valid shape."""


class InvalidDebtorRoutingCode(ValidationError):
    """Supplied debtor BIC does not have a valid shape."""


class InvalidTextField(ValidationError):
    """Free-text field is not a string or holds characters XML cannot carry."""


class ConfigurationError(SepaCreditError):
    """Raised when settings are invalid or missing."""

    def __init__(
        self,
        message: str,
        *,
        setting: str | None = None,
        expected: str | None = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context", {})
        if setting:
            context["setting"] = setting
        if expected:
            context["expected"] = expected
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# =============================================================================
# Routing (IBAN -> BIC) Errors
# =============================================================================


class RoutingError(SepaCreditError):
    """Base class for BIC derivation failures."""

    def __init__(
        self,
        message: str,
        *,
        iban: str | None = None,
        bank_code: str | None = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context", {})
        if iban:
            context["iban"] = iban
        if bank_code:
            context["bank_code"] = bank_code
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class RoutingLookupFailed(RoutingError):
    """No bank code found in the IBAN, or the bank code is not in the table."""


class DebtorRoutingUnresolved(RoutingError):
    """Debtor BIC was not supplied and could not be derived from the IBAN."""


class CreditorRoutingUnresolved(RoutingError):
    """Creditor BIC was not supplied and could not be derived from the IBAN."""


# =============================================================================
# Batch Errors
# =============================================================================


class BatchError(SepaCreditError):
    """Base class for batch lifecycle violations."""


class EmptyBatch(BatchError):
    """Raised when rendering a batch without transactions or with a zero total."""

    def __init__(
        self,
        message: str,
        *,
        transaction_count: int | None = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context", {})
        if transaction_count is not None:
            context["transaction_count"] = transaction_count
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# =============================================================================
# Utility Functions
# =============================================================================


def wrap_exception(
    error: Exception,
    message: str,
    *,
    exception_class: type[SepaCreditError] = SepaCreditError,
    **context: Any,
) -> SepaCreditError:
    """Wrap an exception in the sepacredit hierarchy, preserving the original.

    Example:
        try:
            bic = resolve_routing_code(iban)
        except RoutingLookupFailed as e:
            raise wrap_exception(
                e,
                "Debtor BIC could not be derived",
                exception_class=DebtorRoutingUnresolved,
                iban=iban,
            ) from e
    """
    return exception_class(
        message,
        context={key: value for key, value in context.items() if value is not None},
        original_error=error,
    )


__all__ = [
    # Base
    "SepaCreditError",
    # Validation
    "ValidationError",
    "InvalidDebtorIdentifier",
    "InvalidCreditorIdentifier",
    "InvalidAmountFormat",
    "InvalidCreditorRoutingCode",
    "InvalidDebtorRoutingCode",
    "InvalidTextField",
    "ConfigurationError",
    # Routing
    "RoutingError",
    "RoutingLookupFailed",
    "DebtorRoutingUnresolved",
    "CreditorRoutingUnresolved",
    # Batch
    "BatchError",
    "EmptyBatch",
    # Utilities
    "wrap_exception",
]
