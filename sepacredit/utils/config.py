"""Settings for sepacredit.

Pydantic-based configuration; every field can be overridden through
environment variables with the ``SEPACREDIT_`` prefix.

Loading the settings through ``get_settings()`` also applies the logging fields
(level, JSON output, dev mode) to the package loggers.

Environment Variables:
- SEPACREDIT_DEFAULT_CURRENCY: Currency used when a transaction names none (default: EUR)
- SEPACREDIT_LOG_LEVEL: Logging level (default: INFO)
- SEPACREDIT_JSON_LOGS: Emit JSON log lines (default: false)
- SEPACREDIT_DEV_MODE: Colourful console logs (default: true)
- SEPACREDIT_PRETTY_PRINT: Indent rendered documents (default: true)
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from sepacredit.exceptions import ConfigurationError
from sepacredit.utils.logging import configure_from_settings


class Settings(BaseSettings):
    """Runtime settings.

    Example:
        >>> settings = Settings()
        >>> settings.default_currency
        'EUR'
    """

    model_config = SettingsConfigDict(
        env_prefix="SEPACREDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    default_currency: str = Field(
        default="EUR",
        min_length=3,
        max_length=3,
        description="ISO 4217 code used when add_transaction gets no currency",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Root logging level",
    )

    json_logs: bool = Field(
        default=False,
        description="Render log entries as JSON (when dev_mode is off)",
    )

    dev_mode: bool = Field(
        default=True,
        description="Use the colourful console renderer",
    )

    pretty_print: bool = Field(
        default=True,
        description="Indent the rendered XML document",
    )

    @field_validator("default_currency")
    @classmethod
    def _currency_alpha(cls, value: str) -> str:
        value = value.upper()
        if not value.isalpha() or not value.isascii():
            raise ValueError("currency must be a 3-letter ISO 4217 code")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


_settings: Settings | None = None


def get_settings(force_reload: bool = False) -> Settings:
    """Get or create the cached settings.

    Args:
        force_reload: Re-read the environment (and reconfigure logging)

    Returns:
        Settings instance

    Raises:
        ConfigurationError: If an environment override is invalid
    """
    global _settings

    if _settings is None or force_reload:
        try:
            _settings = Settings()
        except PydanticValidationError as e:
            first = e.errors()[0] if e.errors() else {}
            setting = ".".join(str(part) for part in first.get("loc", ()))
            raise ConfigurationError(
                f"Invalid sepacredit settings: {first.get('msg', e)}",
                setting=setting or None,
                original_error=e,
            ) from e
        configure_from_settings(_settings)

    return _settings
