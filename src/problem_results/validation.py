"""Validation failure records and their per-property grouping.

Validation libraries report a flat list of ``{field, message}`` failures.
Problem documents present them grouped by property under the ``errors``
extension. :func:`group_failures` keeps the first-seen property order and the
original order of failures within each group.

Examples
--------
>>> from problem_results.validation import ValidationFailure, group_failures
>>> groups = group_failures(
...     [
...         ValidationFailure("name", "Name is required."),
...         ValidationFailure("alias", "Alias is too long."),
...         ValidationFailure("name", "Name must be unique."),
...     ]
... )
>>> [group.property_name for group in groups]
['name', 'alias']
>>> len(groups[0].failures)
2
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from problem_results.types import JsonObject

__all__ = [
    "ValidationErrorGroup",
    "ValidationFailure",
    "failures_from_pydantic",
    "group_failures",
]

# First ``loc`` segment FastAPI prepends to say where a field came from.
_REQUEST_LOCATIONS: Final[frozenset[str]] = frozenset(
    {"body", "query", "path", "header", "cookie"}
)


@dataclass(frozen=True, slots=True)
class ValidationFailure:
    """A single failed validation rule.

    Attributes
    ----------
    field : str
        Name (or dotted path) of the failing property.
    message : str
        Human-readable failure message.
    code : str | None
        Optional machine-readable rule identifier from the validation library.
    """

    field: str
    message: str
    code: str | None = None

    def to_payload(self) -> JsonObject:
        """Return the JSON form used inside the ``errors`` extension."""
        payload: JsonObject = {"field": self.field, "message": self.message}
        if self.code is not None:
            payload["code"] = self.code
        return payload


@dataclass(frozen=True, slots=True)
class ValidationErrorGroup:
    """All failures reported for one property."""

    property_name: str
    failures: tuple[ValidationFailure, ...]

    def to_payload(self) -> JsonObject:
        """Return the JSON form used inside the ``errors`` extension."""
        return {
            "propertyName": self.property_name,
            "errors": [failure.to_payload() for failure in self.failures],
        }


def group_failures(failures: Iterable[ValidationFailure]) -> tuple[ValidationErrorGroup, ...]:
    """Group ``failures`` by field name.

    Parameters
    ----------
    failures : Iterable[ValidationFailure]
        Failures in the order the validator reported them.

    Returns
    -------
    tuple[ValidationErrorGroup, ...]
        One group per distinct field in first-seen order; each group keeps its
        failures in input order.
    """
    grouped: dict[str, list[ValidationFailure]] = {}
    for failure in failures:
        grouped.setdefault(failure.field, []).append(failure)
    return tuple(
        ValidationErrorGroup(property_name=name, failures=tuple(items))
        for name, items in grouped.items()
    )


class _ErrorListProvider(Protocol):
    def errors(self) -> Sequence[Mapping[str, object]]: ...


def _field_name(loc: object) -> str:
    if not isinstance(loc, (list, tuple)):
        return str(loc) if loc is not None else ""
    parts = [str(part) for part in loc]
    if len(parts) > 1 and parts[0] in _REQUEST_LOCATIONS:
        parts = parts[1:]
    return ".".join(parts)


def failures_from_pydantic(exc: _ErrorListProvider) -> tuple[ValidationFailure, ...]:
    """Convert a pydantic or FastAPI validation error into failure records.

    Accepts :class:`pydantic.ValidationError` and
    :class:`fastapi.exceptions.RequestValidationError` alike; both expose
    ``errors()`` returning ``loc``/``msg``/``type`` entries. FastAPI's leading
    request location (``body``, ``query`` ...) is dropped from field names.

    Parameters
    ----------
    exc : _ErrorListProvider
        Validation error exposing ``errors()``.

    Returns
    -------
    tuple[ValidationFailure, ...]
        Failures in reported order.
    """
    failures: list[ValidationFailure] = []
    for entry in exc.errors():
        code = entry.get("type")
        failures.append(
            ValidationFailure(
                field=_field_name(entry.get("loc")),
                message=str(entry.get("msg", "")),
                code=None if code is None else str(code),
            )
        )
    return tuple(failures)
