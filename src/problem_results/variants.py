"""Typed problem variants and conversion from raw failure signals.

Each :class:`~problem_results.errors.codes.ErrorKind` has one frozen variant
class carrying its named diagnostic fields. The dispatcher renders exactly the
:data:`ProblemVariant` union, so every input is converted here first:

* :func:`variant_from_structured` turns a :class:`StructuredError` (kind,
  description and an untyped context map crossing in from a result type) into
  a variant. This is the only place that reads context keys; missing or
  ill-typed entries become empty values instead of failures.
* :func:`variant_from_exception` handles typed failures, cancellations and
  everything else.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import ClassVar, Final, assert_never

from problem_results.errors.codes import ErrorKind, coerce_error_kind
from problem_results.errors.exceptions import UnsupportedErrorKindError
from problem_results.problem_details import ExtensionKey
from problem_results.validation import ValidationFailure

__all__ = [
    "TASK_CONTEXT_KEY",
    "BadRequestProblem",
    "ForbiddenProblem",
    "ProblemVariant",
    "ResourceAlreadyExistsProblem",
    "ResourceCreateFailedProblem",
    "ResourceDeleteFailedProblem",
    "ResourceNotFoundProblem",
    "ResourcePatchFailedProblem",
    "ResourceUpdateFailedProblem",
    "StructuredError",
    "TaskCancelledProblem",
    "UnauthorizedProblem",
    "UnexpectedProblem",
    "ValidationFailedProblem",
    "variant_from_exception",
    "variant_from_structured",
]

TASK_CONTEXT_KEY: Final[str] = "task"
"""Context key naming the cancelled task on the structured path."""

_EMPTY: Final[Mapping[str, object]] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class StructuredError:
    """A failure reported through a result value instead of an exception.

    Attributes
    ----------
    kind : object
        Error kind. Usually an :class:`ErrorKind` or its value, but any value
        is accepted; unknown kinds render as unexpected errors.
    description : str
        Raw, non-localized description.
    context : Mapping[str, object]
        Kind-specific diagnostic fields keyed by extension name
        (``resource``, ``property-name`` ...).
    """

    kind: object
    description: str = ""
    context: Mapping[str, object] = field(default_factory=lambda: _EMPTY)


@dataclass(frozen=True, slots=True)
class BadRequestProblem:
    kind: ClassVar[ErrorKind] = ErrorKind.BAD_REQUEST

    description: str


@dataclass(frozen=True, slots=True)
class ForbiddenProblem:
    kind: ClassVar[ErrorKind] = ErrorKind.FORBIDDEN

    description: str


@dataclass(frozen=True, slots=True)
class UnauthorizedProblem:
    """Empty ``resource`` means "the requested instance"."""

    kind: ClassVar[ErrorKind] = ErrorKind.UNAUTHORIZED

    description: str
    resource: str = ""


@dataclass(frozen=True, slots=True)
class ResourceNotFoundProblem:
    kind: ClassVar[ErrorKind] = ErrorKind.RESOURCE_NOT_FOUND

    description: str
    resource: str
    property_name: str
    property_value: str


@dataclass(frozen=True, slots=True)
class ResourceAlreadyExistsProblem:
    kind: ClassVar[ErrorKind] = ErrorKind.RESOURCE_ALREADY_EXISTS

    description: str
    resource: str
    property_name: str
    property_value: str


@dataclass(frozen=True, slots=True)
class ResourceCreateFailedProblem:
    kind: ClassVar[ErrorKind] = ErrorKind.RESOURCE_CREATE_FAILED

    description: str
    resource: str
    new_resource: object = None
    reasons: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ResourceUpdateFailedProblem:
    kind: ClassVar[ErrorKind] = ErrorKind.RESOURCE_UPDATE_FAILED

    description: str
    resource: str
    updated_resource: object = None
    reasons: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ResourcePatchFailedProblem:
    kind: ClassVar[ErrorKind] = ErrorKind.RESOURCE_PATCH_FAILED

    description: str
    resource: str
    patches: Mapping[str, str | None] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True, slots=True)
class ResourceDeleteFailedProblem:
    kind: ClassVar[ErrorKind] = ErrorKind.RESOURCE_DELETE_FAILED

    description: str
    resource: str
    reasons: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ValidationFailedProblem:
    kind: ClassVar[ErrorKind] = ErrorKind.VALIDATION_FAILED

    description: str
    failures: tuple[ValidationFailure, ...]


@dataclass(frozen=True, slots=True)
class TaskCancelledProblem:
    """Empty ``task`` means "the requested instance"."""

    kind: ClassVar[ErrorKind] = ErrorKind.TASK_CANCELLED

    description: str
    task: str = ""


@dataclass(frozen=True, slots=True)
class UnexpectedProblem:
    kind: ClassVar[ErrorKind] = ErrorKind.UNEXPECTED_ERROR

    description: str


type ProblemVariant = (
    BadRequestProblem
    | ForbiddenProblem
    | UnauthorizedProblem
    | ResourceNotFoundProblem
    | ResourceAlreadyExistsProblem
    | ResourceCreateFailedProblem
    | ResourceUpdateFailedProblem
    | ResourcePatchFailedProblem
    | ResourceDeleteFailedProblem
    | ValidationFailedProblem
    | TaskCancelledProblem
    | UnexpectedProblem
)


def _text(context: Mapping[str, object], key: str) -> str:
    value = context.get(key)
    return "" if value is None else str(value)


def _strings(context: Mapping[str, object], key: str) -> tuple[str, ...]:
    value = context.get(key)
    if value is None or isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
        return ()
    return tuple(str(item) for item in value if item is not None)


def _patches(context: Mapping[str, object]) -> Mapping[str, str | None]:
    value = context.get(ExtensionKey.PATCHES.value)
    if not isinstance(value, Mapping):
        return MappingProxyType({})
    return MappingProxyType(
        {str(key): None if item is None else str(item) for key, item in value.items()}
    )


def _failure(item: object) -> ValidationFailure | None:
    if isinstance(item, ValidationFailure):
        return item
    if isinstance(item, Mapping):
        name = item.get("field", item.get("propertyName"))
        message = item.get("message", item.get("errorMessage"))
        if name is None or message is None:
            return None
        code = item.get("code")
        return ValidationFailure(
            field=str(name), message=str(message), code=None if code is None else str(code)
        )
    return None


def _failures(context: Mapping[str, object]) -> tuple[ValidationFailure, ...]:
    value = context.get(ExtensionKey.ERRORS.value)
    if value is None or isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
        return ()
    return tuple(failure for failure in map(_failure, value) if failure is not None)


def variant_from_structured(error: StructuredError) -> ProblemVariant:
    """Convert ``error`` into its typed variant.

    Parameters
    ----------
    error : StructuredError
        Structured failure from a result value.

    Returns
    -------
    ProblemVariant
        The typed variant. Unknown kinds become :class:`UnexpectedProblem`.
    """
    context = error.context if isinstance(error.context, Mapping) else _EMPTY
    description = error.description or _text(context, ExtensionKey.ERROR_MESSAGE.value)
    try:
        kind = coerce_error_kind(error.kind)
    except UnsupportedErrorKindError:
        return UnexpectedProblem(description=description)

    resource = _text(context, ExtensionKey.RESOURCE.value)
    property_name = _text(context, ExtensionKey.PROPERTY_NAME.value)
    property_value = _text(context, ExtensionKey.PROPERTY_VALUE.value)
    reasons = _strings(context, ExtensionKey.REASONS.value)

    match kind:
        case ErrorKind.BAD_REQUEST:
            return BadRequestProblem(description=description)
        case ErrorKind.FORBIDDEN:
            return ForbiddenProblem(description=description)
        case ErrorKind.UNAUTHORIZED:
            return UnauthorizedProblem(description=description, resource=resource)
        case ErrorKind.RESOURCE_NOT_FOUND:
            return ResourceNotFoundProblem(
                description=description,
                resource=resource,
                property_name=property_name,
                property_value=property_value,
            )
        case ErrorKind.RESOURCE_ALREADY_EXISTS:
            return ResourceAlreadyExistsProblem(
                description=description,
                resource=resource,
                property_name=property_name,
                property_value=property_value,
            )
        case ErrorKind.RESOURCE_CREATE_FAILED:
            return ResourceCreateFailedProblem(
                description=description,
                resource=resource,
                new_resource=context.get(ExtensionKey.NEW_RESOURCE.value),
                reasons=reasons,
            )
        case ErrorKind.RESOURCE_UPDATE_FAILED:
            return ResourceUpdateFailedProblem(
                description=description,
                resource=resource,
                updated_resource=context.get(ExtensionKey.UPDATED_RESOURCE.value),
                reasons=reasons,
            )
        case ErrorKind.RESOURCE_PATCH_FAILED:
            return ResourcePatchFailedProblem(
                description=description, resource=resource, patches=_patches(context)
            )
        case ErrorKind.RESOURCE_DELETE_FAILED:
            return ResourceDeleteFailedProblem(
                description=description, resource=resource, reasons=reasons
            )
        case ErrorKind.VALIDATION_FAILED:
            return ValidationFailedProblem(description=description, failures=_failures(context))
        case ErrorKind.TASK_CANCELLED:
            return TaskCancelledProblem(
                description=description, task=_text(context, TASK_CONTEXT_KEY)
            )
        case ErrorKind.UNEXPECTED_ERROR:
            return UnexpectedProblem(description=description)
        case _:
            assert_never(kind)


def variant_from_exception(exc: BaseException) -> ProblemVariant:
    """Convert any exception into a typed variant.

    Typed failures (:mod:`problem_results.failures`) supply their own variant,
    :class:`asyncio.CancelledError` becomes a cancelled task, and anything
    else, including :class:`UnsupportedErrorKindError`, becomes an unexpected
    error carrying ``str(exc)`` verbatim.
    """
    from problem_results.failures import ProblemFailure  # noqa: PLC0415 - failures imports this module

    if isinstance(exc, ProblemFailure):
        return exc.to_variant()
    if isinstance(exc, asyncio.CancelledError):
        return TaskCancelledProblem(description=str(exc) or "The operation was cancelled.")
    return UnexpectedProblem(description=str(exc))
