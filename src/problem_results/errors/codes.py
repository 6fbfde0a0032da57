"""Error kind registry and classification URIs for problem documents.

This module defines the closed set of error kinds the engine renders and the
fixed ``{type URI, HTTP status}`` pair of each one. The registry is built once
at import time and exposed read-only; kinds, URIs and statuses are frozen to
keep problem documents stable for API consumers.

Examples
--------
>>> from problem_results.errors.codes import ErrorKind, classification_for
>>> entry = classification_for(ErrorKind.RESOURCE_NOT_FOUND)
>>> entry.status
404
>>> entry.type_uri
'https://problems.problem-results.dev/resource-not-found'
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from problem_results.errors.exceptions import UnsupportedErrorKindError

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = [
    "BASE_TYPE_URI",
    "CLASSIFICATIONS",
    "CLIENT_CLOSED_REQUEST",
    "ClassificationEntry",
    "ErrorKind",
    "classification_for",
    "coerce_error_kind",
    "get_type_uri",
]


BASE_TYPE_URI: Final[str] = "https://problems.problem-results.dev"

CLIENT_CLOSED_REQUEST: Final[int] = 499
"""Non-standard "client closed request" status used for cancelled tasks."""


class ErrorKind(StrEnum):
    """Closed set of failure categories rendered as problem documents.

    Values are stable kebab-case identifiers and appear verbatim in the
    ``error-code`` extension of every problem document.

    Attributes
    ----------
    BAD_REQUEST
        The request itself is malformed.
    FORBIDDEN
        The caller is authenticated but may not access the resource.
    UNAUTHORIZED
        The caller is not authenticated for the resource.
    RESOURCE_NOT_FOUND
        No resource matches the requested property value.
    RESOURCE_ALREADY_EXISTS
        A resource with the same property value already exists.
    RESOURCE_CREATE_FAILED
        Creating a resource failed.
    RESOURCE_UPDATE_FAILED
        Updating a resource failed.
    RESOURCE_PATCH_FAILED
        Patching a resource failed.
    RESOURCE_DELETE_FAILED
        Deleting a resource failed.
    VALIDATION_FAILED
        Request validation produced one or more failures.
    TASK_CANCELLED
        The operation was cancelled before it completed.
    UNEXPECTED_ERROR
        Anything the engine does not recognise.
    """

    BAD_REQUEST = "bad-request"
    FORBIDDEN = "forbidden"
    UNAUTHORIZED = "unauthorized"
    RESOURCE_NOT_FOUND = "resource-not-found"
    RESOURCE_ALREADY_EXISTS = "resource-already-exists"
    RESOURCE_CREATE_FAILED = "resource-create-failed"
    RESOURCE_UPDATE_FAILED = "resource-update-failed"
    RESOURCE_PATCH_FAILED = "resource-patch-failed"
    RESOURCE_DELETE_FAILED = "resource-delete-failed"
    VALIDATION_FAILED = "validation-failed"
    TASK_CANCELLED = "task-cancelled"
    UNEXPECTED_ERROR = "unexpected-error"

    def __str__(self) -> str:
        """Return the kind value (e.g. ``"resource-not-found"``)."""
        return self.value


@dataclass(frozen=True, slots=True)
class ClassificationEntry:
    """Fixed classification of an :class:`ErrorKind`.

    Attributes
    ----------
    kind : ErrorKind
        The classified kind.
    type_uri : str
        Problem ``type`` URI.
    status : int
        HTTP status code.
    """

    kind: ErrorKind
    type_uri: str
    status: int


def get_type_uri(slug: str) -> str:
    """Return the problem type URI for ``slug`` under :data:`BASE_TYPE_URI`.

    Parameters
    ----------
    slug : str
        Final path segment, e.g. ``"bad-request"``.

    Returns
    -------
    str
        Absolute type URI.
    """
    return f"{BASE_TYPE_URI}/{slug}"


def _entry(kind: ErrorKind, slug: str, status: int) -> tuple[ErrorKind, ClassificationEntry]:
    return kind, ClassificationEntry(kind=kind, type_uri=get_type_uri(slug), status=status)


# Validation failures share the bad-request classification.
CLASSIFICATIONS: Final[Mapping[ErrorKind, ClassificationEntry]] = MappingProxyType(
    dict(
        (
            _entry(ErrorKind.BAD_REQUEST, "bad-request", 400),
            _entry(ErrorKind.VALIDATION_FAILED, "bad-request", 400),
            _entry(ErrorKind.UNAUTHORIZED, "unauthorized", 401),
            _entry(ErrorKind.FORBIDDEN, "forbidden", 403),
            _entry(ErrorKind.RESOURCE_NOT_FOUND, "resource-not-found", 404),
            _entry(ErrorKind.RESOURCE_DELETE_FAILED, "resource-delete-failed", 404),
            _entry(ErrorKind.RESOURCE_ALREADY_EXISTS, "conflict", 409),
            _entry(ErrorKind.RESOURCE_CREATE_FAILED, "resource-creation-failed", 422),
            _entry(ErrorKind.RESOURCE_UPDATE_FAILED, "resource-update-failed", 422),
            _entry(ErrorKind.RESOURCE_PATCH_FAILED, "resource-patch-failed", 422),
            _entry(ErrorKind.TASK_CANCELLED, "request-cancelled", CLIENT_CLOSED_REQUEST),
            _entry(ErrorKind.UNEXPECTED_ERROR, "unexpected-error", 500),
        )
    )
)


def coerce_error_kind(value: object) -> ErrorKind:
    """Return ``value`` as an :class:`ErrorKind`.

    Parameters
    ----------
    value : object
        An :class:`ErrorKind` or its string value.

    Returns
    -------
    ErrorKind
        The matching member.

    Raises
    ------
    UnsupportedErrorKindError
        If ``value`` is not a member of the closed set.
    """
    if isinstance(value, ErrorKind):
        return value
    if isinstance(value, str):
        try:
            return ErrorKind(value)
        except ValueError as exc:
            msg = f"Unsupported error kind: {value!r}"
            raise UnsupportedErrorKindError(msg, kind=value) from exc
    msg = f"Unsupported error kind: {value!r}"
    raise UnsupportedErrorKindError(msg, kind=value)


def classification_for(kind: ErrorKind | str) -> ClassificationEntry:
    """Return the classification registered for ``kind``.

    Parameters
    ----------
    kind : ErrorKind | str
        Error kind, or its string value.

    Returns
    -------
    ClassificationEntry
        The fixed type URI and status of ``kind``.

    Raises
    ------
    UnsupportedErrorKindError
        If ``kind`` is not a registered error kind.

    Examples
    --------
    >>> classification_for("validation-failed").type_uri
    'https://problems.problem-results.dev/bad-request'
    """
    resolved = coerce_error_kind(kind)
    entry = CLASSIFICATIONS.get(resolved)
    if entry is None:
        msg = f"No classification registered for error kind: {resolved.value!r}"
        raise UnsupportedErrorKindError(msg, kind=resolved.value)
    return entry
