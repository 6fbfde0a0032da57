"""Localized message resolution with deterministic fallback.

The engine consumes translations only through the :class:`Translator`
protocol: ``resolve(key, default, locale, *params)``. When the locale or the
key is unknown the default template is formatted instead, so callers always
receive usable (if untranslated) text.

:class:`ProblemMessages` sits on top of a translator and exposes one method
per problem title and detail. It validates parameters *before* resolution and
raises :class:`~problem_results.errors.InvalidParameterError` for blank
strings or non-positive counts.

The locale is an explicit argument of every call. Nothing in this module
reads or stores an "active" locale.

Examples
--------
>>> from problem_results.translation import CatalogTranslator, ProblemMessages
>>> translator = CatalogTranslator({"de": {"FORBIDDEN_TITLE": "Zugriff verweigert!"}})
>>> messages = ProblemMessages(translator)
>>> messages.forbidden_title("de")
'Zugriff verweigert!'
>>> messages.forbidden_title("ja")
'Access forbidden!'
"""

from __future__ import annotations

import json
import string
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Final, Protocol, runtime_checkable

from problem_results.errors.exceptions import CatalogLoadError, InvalidParameterError
from problem_results.logging import get_logger
from problem_results.messages import MESSAGE_TEMPLATES, MessageKey, template_for

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from problem_results.messages import MessageTemplate

__all__ = [
    "CatalogTranslator",
    "DefaultTranslator",
    "ProblemMessages",
    "Translator",
    "format_template",
    "load_bundled_catalogs",
    "load_catalogs",
    "normalize_locale",
]

logger = get_logger(__name__)

_FORMATTER: Final = string.Formatter()
_BUNDLED_PACKAGE: Final[str] = "problem_results"


@runtime_checkable
class Translator(Protocol):
    """Contract for localized text resolution.

    Implementations must never fail for an unknown locale or key; they fall
    back to ``format_template(default, *params)``.
    """

    def resolve(self, key: str, default: str, locale: str, *params: object) -> str:
        """Return ``key`` translated for ``locale`` with ``params`` substituted."""
        ...


def format_template(template: str, *params: object) -> str:
    """Substitute positional ``params`` into ``template``.

    Parameters
    ----------
    template : str
        Template with ``{0}``-style placeholders.
    *params : object
        Positional values.

    Returns
    -------
    str
        The formatted text.
    """
    return template.format(*params)


def normalize_locale(locale: str) -> str:
    """Return ``locale`` lower-cased with ``-`` as subtag separator."""
    return locale.strip().replace("_", "-").lower()


def _placeholders(template: str) -> set[str]:
    fields: set[str] = set()
    for _literal, field_name, _spec, _conversion in _FORMATTER.parse(template):
        if field_name is None:
            continue
        if not field_name.isdigit():
            msg = f"Only positional placeholders are allowed, found {{{field_name}}}"
            raise ValueError(msg)
        fields.add(field_name)
    return fields


def _check_catalog(locale: str, entries: Mapping[str, str]) -> None:
    for key, text in entries.items():
        if not isinstance(text, str):
            msg = f"Catalog '{locale}' entry {key!r} must be a string"
            raise CatalogLoadError(msg, context={"locale": locale, "key": key})
        try:
            fields = _placeholders(text)
        except ValueError as exc:
            msg = f"Catalog '{locale}' entry {key!r} is not a valid template: {exc}"
            raise CatalogLoadError(msg, cause=exc, context={"locale": locale, "key": key}) from exc

        if key in MESSAGE_TEMPLATES:
            expected = _placeholders(template_for(MessageKey(key)).default)
            unknown = fields - expected
            if unknown:
                msg = (
                    f"Catalog '{locale}' entry {key!r} uses placeholders "
                    f"{sorted(unknown)} absent from the default template"
                )
                raise CatalogLoadError(msg, context={"locale": locale, "key": key})


class DefaultTranslator:
    """Translator that always renders the default template."""

    def resolve(self, key: str, default: str, locale: str, *params: object) -> str:
        del key, locale
        return format_template(default, *params)


class CatalogTranslator:
    """Translator backed by in-memory per-locale catalogs.

    Lookup tries the exact locale, then its primary language subtag
    (``"de-AT"`` falls back to ``"de"``), then the default template.

    Parameters
    ----------
    catalogs : Mapping[str, Mapping[str, str]]
        Locale to ``{key: template}`` mapping. Templates are checked for
        positional placeholders when the translator is built.

    Raises
    ------
    CatalogLoadError
        If a template is malformed or uses placeholders its default lacks.
    """

    def __init__(self, catalogs: Mapping[str, Mapping[str, str]]) -> None:
        frozen: dict[str, Mapping[str, str]] = {}
        for locale, entries in catalogs.items():
            _check_catalog(locale, entries)
            frozen[normalize_locale(locale)] = MappingProxyType(dict(entries))
        self._catalogs: Mapping[str, Mapping[str, str]] = MappingProxyType(frozen)

    @property
    def locales(self) -> tuple[str, ...]:
        """Normalized locales with a catalog, sorted."""
        return tuple(sorted(self._catalogs))

    def _lookup(self, key: str, locale: str) -> str | None:
        normalized = normalize_locale(locale)
        candidates = [normalized]
        language = normalized.split("-", 1)[0]
        if language != normalized:
            candidates.append(language)
        for candidate in candidates:
            catalog = self._catalogs.get(candidate)
            if catalog is not None and key in catalog:
                return catalog[key]
        return None

    def resolve(self, key: str, default: str, locale: str, *params: object) -> str:
        """Return ``key`` for ``locale``, falling back to ``default``.

        Parameters
        ----------
        key : str
            Catalog key.
        default : str
            Default-language template.
        locale : str
            Requested locale, e.g. ``"fr"`` or ``"de-AT"``.
        *params : object
            Positional template parameters.

        Returns
        -------
        str
            Localized text, or ``format_template(default, *params)``.
        """
        template = self._lookup(key, locale)
        if template is None:
            return format_template(default, *params)
        return format_template(template, *params)


def _read_catalog(path: Path) -> dict[str, str]:
    try:
        payload: object = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        msg = f"Failed to read translation catalog {path}: {exc}"
        raise CatalogLoadError(msg, cause=exc, context={"path": str(path)}) from exc
    if not isinstance(payload, dict):
        msg = f"Translation catalog {path} must contain a JSON object"
        raise CatalogLoadError(msg, context={"path": str(path)})
    return {str(key): value for key, value in payload.items()}


def load_catalogs(
    directory: Path | str,
    *,
    locales: Iterable[str] | None = None,
) -> CatalogTranslator:
    """Build a :class:`CatalogTranslator` from ``<locale>.json`` files.

    Parameters
    ----------
    directory : Path | str
        Directory holding one JSON object per locale.
    locales : Iterable[str] | None, optional
        Restrict loading to these locales. Files for other locales are
        skipped. Defaults to every file found.

    Returns
    -------
    CatalogTranslator
        Translator over the loaded catalogs.

    Raises
    ------
    CatalogLoadError
        If the directory is missing or a catalog is unreadable or malformed.
    """
    root = Path(directory)
    if not root.is_dir():
        msg = f"Translation catalog directory not found: {root}"
        raise CatalogLoadError(msg, context={"path": str(root)})

    wanted = None if locales is None else {normalize_locale(locale) for locale in locales}
    catalogs: dict[str, dict[str, str]] = {}
    for path in sorted(root.glob("*.json")):
        locale = normalize_locale(path.stem)
        if wanted is not None and locale not in wanted:
            logger.debug(
                "Skipping unsupported catalog",
                extra={"operation": "load_catalogs", "locale": locale},
            )
            continue
        catalogs[locale] = _read_catalog(path)

    translator = CatalogTranslator(catalogs)
    logger.info(
        "Loaded translation catalogs",
        extra={"operation": "load_catalogs", "locales": list(translator.locales)},
    )
    return translator


def load_bundled_catalogs(*, locales: Iterable[str] | None = None) -> CatalogTranslator:
    """Load the catalogs shipped inside the package."""
    bundled = resources.files(_BUNDLED_PACKAGE) / "resources" / "catalogs"
    with resources.as_file(bundled) as directory:
        return load_catalogs(directory, locales=locales)


def _require_text(value: object, *, parameter: str, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        msg = f"{label} cannot be empty or whitespace."
        raise InvalidParameterError(msg, parameter=parameter)
    return value


def _require_count(value: object, *, parameter: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        msg = f"{parameter} must be a positive integer, got {value!r}."
        raise InvalidParameterError(msg, parameter=parameter)
    return value


class ProblemMessages:
    """Resolve every problem title and detail through a :class:`Translator`.

    Parameters
    ----------
    translator : Translator
        Underlying translation source.
    """

    def __init__(self, translator: Translator) -> None:
        self._translator = translator

    def translate(self, template: MessageTemplate, locale: str, *params: object) -> str:
        """Resolve ``template`` for ``locale`` with ``params``."""
        return self._translator.resolve(template.key.value, template.default, locale, *params)

    def _message(self, key: MessageKey, locale: str, *params: object) -> str:
        return self.translate(template_for(key), locale, *params)

    def bad_request_title(self, locale: str) -> str:
        return self._message(MessageKey.BAD_REQUEST_TITLE, locale)

    def bad_request(self, locale: str, method: str, path: str) -> str:
        """Detail for a bad request; the method is upper-cased."""
        method = _require_text(method, parameter="method", label="Method")
        path = _require_text(path, parameter="path", label="Path")
        return self._message(MessageKey.BAD_REQUEST, locale, method.upper(), path)

    def forbidden_title(self, locale: str) -> str:
        return self._message(MessageKey.FORBIDDEN_TITLE, locale)

    def forbidden(self, locale: str) -> str:
        return self._message(MessageKey.FORBIDDEN, locale)

    def unauthorized_title(self, locale: str) -> str:
        return self._message(MessageKey.UNAUTHORIZED_TITLE, locale)

    def unauthorized(self, locale: str, resource: str) -> str:
        resource = _require_text(resource, parameter="resource", label="Resource")
        return self._message(MessageKey.UNAUTHORIZED, locale, resource)

    def resource_not_found_title(self, locale: str) -> str:
        return self._message(MessageKey.RESOURCE_NOT_FOUND_TITLE, locale)

    def resource_not_found(
        self, locale: str, resource: str, property_name: str, property_value: str
    ) -> str:
        """Detail naming the missing resource and the property searched on."""
        resource = _require_text(resource, parameter="resource", label="Resource")
        property_name = _require_text(
            property_name, parameter="property_name", label="Property name"
        )
        property_value = _require_text(
            property_value, parameter="property_value", label="Property value"
        )
        return self._message(
            MessageKey.RESOURCE_NOT_FOUND, locale, resource, property_name, property_value
        )

    def resource_already_exists_title(self, locale: str) -> str:
        return self._message(MessageKey.RESOURCE_ALREADY_EXISTS_TITLE, locale)

    def resource_already_exists(
        self, locale: str, resource: str, property_name: str, property_value: str
    ) -> str:
        """Detail naming the conflicting resource and property."""
        resource = _require_text(resource, parameter="resource", label="Resource")
        property_name = _require_text(
            property_name, parameter="property_name", label="Property name"
        )
        property_value = _require_text(
            property_value, parameter="property_value", label="Property value"
        )
        return self._message(
            MessageKey.RESOURCE_ALREADY_EXISTS, locale, resource, property_name, property_value
        )

    def resource_create_failed_title(self, locale: str) -> str:
        return self._message(MessageKey.RESOURCE_CREATE_FAILED_TITLE, locale)

    def resource_create_failed(self, locale: str, resource: str) -> str:
        resource = _require_text(resource, parameter="resource", label="Resource")
        return self._message(MessageKey.RESOURCE_CREATE_FAILED, locale, resource)

    def resource_update_failed_title(self, locale: str) -> str:
        return self._message(MessageKey.RESOURCE_UPDATE_FAILED_TITLE, locale)

    def resource_update_failed(self, locale: str, resource: str) -> str:
        resource = _require_text(resource, parameter="resource", label="Resource")
        return self._message(MessageKey.RESOURCE_UPDATE_FAILED, locale, resource)

    def resource_patch_failed_title(self, locale: str) -> str:
        return self._message(MessageKey.RESOURCE_PATCH_FAILED_TITLE, locale)

    def resource_patch_failed(self, locale: str, resource: str) -> str:
        resource = _require_text(resource, parameter="resource", label="Resource")
        return self._message(MessageKey.RESOURCE_PATCH_FAILED, locale, resource)

    def resource_delete_failed_title(self, locale: str) -> str:
        return self._message(MessageKey.RESOURCE_DELETE_FAILED_TITLE, locale)

    def resource_delete_failed(self, locale: str, resource: str) -> str:
        resource = _require_text(resource, parameter="resource", label="Resource")
        return self._message(MessageKey.RESOURCE_DELETE_FAILED, locale, resource)

    def validation_errors_title(self, locale: str) -> str:
        return self._message(MessageKey.VALIDATION_ERROR_TITLE, locale)

    def validation_errors(self, locale: str, total_errors: int) -> str:
        """Detail parameterized by the total number of validation failures."""
        total_errors = _require_count(total_errors, parameter="total_errors")
        return self._message(MessageKey.VALIDATION_ERROR, locale, total_errors)

    def task_cancelled_title(self, locale: str) -> str:
        return self._message(MessageKey.TASK_CANCELLED_TITLE, locale)

    def task_cancelled(self, locale: str, task: str) -> str:
        task = _require_text(task, parameter="task", label="Task")
        return self._message(MessageKey.TASK_CANCELLED, locale, task)

    def unexpected_error_title(self, locale: str) -> str:
        return self._message(MessageKey.UNEXPECTED_ERROR_TITLE, locale)

    def unexpected_error(self, locale: str) -> str:
        return self._message(MessageKey.UNEXPECTED_ERROR, locale)
