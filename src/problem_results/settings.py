"""Runtime settings with typed configuration and fail-fast validation.

Settings are read from ``PROBLEM_RESULTS_*`` environment variables. Invalid
values raise :class:`~problem_results.errors.SettingsError` at construction
time instead of surfacing later as a broken response.

Examples
--------
>>> from problem_results.settings import load_settings
>>> settings = load_settings(default_locale="de_AT")
>>> settings.default_locale
'de-at'
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Final

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from problem_results.errors import SettingsError
from problem_results.logging import get_logger
from problem_results.translation import (
    CatalogTranslator,
    load_bundled_catalogs,
    load_catalogs,
    normalize_locale,
)

__all__ = [
    "SUPPORTED_LOCALES",
    "ProblemResultsSettings",
    "build_translator",
    "load_settings",
]

logger = get_logger(__name__)

SUPPORTED_LOCALES: Final[tuple[str, ...]] = (
    "ar",
    "bg",
    "cs",
    "cy",
    "da",
    "de",
    "el",
    "en",
    "es",
    "et",
    "fi",
    "fil",
    "fr",
    "ga",
    "hi",
    "hr",
    "hu",
    "it",
    "ja",
    "ko",
    "lt",
    "lv",
    "mt",
    "nl",
    "pl",
    "ro",
    "ru",
    "sk",
    "sl",
    "sv",
    "vi",
    "zh",
)
"""Cultures problem documents may be rendered for."""


class ProblemResultsSettings(BaseSettings):
    """Problem rendering configuration (``PROBLEM_RESULTS_*`` namespace)."""

    model_config = SettingsConfigDict(
        env_prefix="PROBLEM_RESULTS_",
        extra="forbid",
        case_sensitive=False,
    )

    default_locale: str = Field(
        default="en", description="Locale used when the request names none"
    )
    supported_locales: tuple[str, ...] = Field(
        default=SUPPORTED_LOCALES, description="Locales accepted from requests"
    )
    catalog_dir: Path | None = Field(
        default=None,
        description="Directory of <locale>.json catalogs (None uses the bundled ones)",
    )
    validate_payloads: bool = Field(
        default=True, description="Validate problem documents against the JSON Schema"
    )
    trace_header: str = Field(
        default="X-Request-ID", description="Request header carrying the trace id"
    )
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    def __init__(self, **overrides: object) -> None:
        """Initialise settings with fail-fast validation."""
        try:
            super().__init__(**overrides)  # type: ignore[arg-type]  # BaseSettings.__init__ accepts Any kwargs
        except Exception as exc:
            msg = f"Configuration validation failed: {exc}"
            logger.exception(
                "Settings validation failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )
            raise SettingsError(
                msg,
                cause=exc,
                context={"validation_error": str(exc)},
            ) from exc

    @field_validator("default_locale")
    @classmethod
    def normalize_default_locale(cls, value: str) -> str:
        locale = normalize_locale(value)
        if not locale:
            msg = "default_locale cannot be empty"
            raise ValueError(msg)
        return locale

    @field_validator("supported_locales")
    @classmethod
    def normalize_supported_locales(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        locales = tuple(dict.fromkeys(normalize_locale(locale) for locale in value if locale.strip()))
        if not locales:
            msg = "supported_locales cannot be empty"
            raise ValueError(msg)
        return locales

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelNamesMapping().get(level), int):
            msg = f"Unknown log level: {value!r}"
            raise ValueError(msg)
        return level

    @field_validator("trace_header")
    @classmethod
    def check_trace_header(cls, value: str) -> str:
        header = value.strip()
        if not header:
            msg = "trace_header cannot be empty"
            raise ValueError(msg)
        return header

    @model_validator(mode="after")
    def check_default_supported(self) -> ProblemResultsSettings:
        language = self.default_locale.split("-", 1)[0]
        if (
            self.default_locale not in self.supported_locales
            and language not in self.supported_locales
        ):
            msg = f"default_locale {self.default_locale!r} is not a supported locale"
            raise ValueError(msg)
        return self

    def resolve_locale(self, requested: str | None) -> str:
        """Return ``requested`` when supported, else :attr:`default_locale`.

        A regional locale such as ``"de-AT"`` is accepted when its language
        (``"de"``) is supported.
        """
        if not requested:
            return self.default_locale
        locale = normalize_locale(requested)
        if locale in self.supported_locales or locale.split("-", 1)[0] in self.supported_locales:
            return locale
        return self.default_locale


def load_settings(**overrides: object) -> ProblemResultsSettings:
    """Load :class:`ProblemResultsSettings` with optional overrides."""
    try:
        return ProblemResultsSettings(**overrides)
    except SettingsError:
        raise
    except Exception as exc:
        msg = f"Failed to load settings: {exc}"
        logger.exception(
            "Settings loading failed",
            extra={"error": str(exc), "error_type": type(exc).__name__},
        )
        raise SettingsError(
            msg,
            cause=exc,
            context={"validation_error": str(exc)},
        ) from exc


def build_translator(settings: ProblemResultsSettings) -> CatalogTranslator:
    """Load the catalogs ``settings`` point at, limited to supported locales.

    Raises
    ------
    CatalogLoadError
        If a catalog is unreadable or malformed.
    """
    if settings.catalog_dir is None:
        return load_bundled_catalogs(locales=settings.supported_locales)
    return load_catalogs(settings.catalog_dir, locales=settings.supported_locales)
