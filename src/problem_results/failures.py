"""Typed failures raised by business code and rendered as problem documents.

Raise these from request handlers; the dispatcher turns them into localized
problem documents. Each failure knows how to convert itself into the typed
variant of its :class:`~problem_results.errors.codes.ErrorKind`.

Examples
--------
>>> from problem_results.failures import ResourceNotFoundError
>>> try:
...     raise ResourceNotFoundError("User", "id", 42)
... except ResourceNotFoundError as e:
...     assert e.kind == "resource-not-found"
...     assert e.to_variant().property_value == "42"
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import ClassVar

from problem_results.errors.codes import ErrorKind
from problem_results.validation import ValidationFailure
from problem_results.variants import (
    BadRequestProblem,
    ForbiddenProblem,
    ProblemVariant,
    ResourceAlreadyExistsProblem,
    ResourceCreateFailedProblem,
    ResourceDeleteFailedProblem,
    ResourceNotFoundProblem,
    ResourcePatchFailedProblem,
    ResourceUpdateFailedProblem,
    StructuredError,
    TaskCancelledProblem,
    UnauthorizedProblem,
    UnexpectedProblem,
    ValidationFailedProblem,
    variant_from_structured,
)

__all__ = [
    "BadRequestError",
    "ForbiddenError",
    "ProblemFailure",
    "ResourceAlreadyExistsError",
    "ResourceCreateFailedError",
    "ResourceDeleteFailedError",
    "ResourceNotFoundError",
    "ResourcePatchFailedError",
    "ResourceUpdateFailedError",
    "ResultError",
    "TaskCancelledError",
    "UnauthorizedError",
    "ValidationFailedError",
]


def _value_text(value: object) -> str:
    return "" if value is None else str(value)


class ProblemFailure(Exception):
    """Base class of all failures the dispatcher renders.

    Parameters
    ----------
    message : str | None, optional
        Raw failure description; it becomes the ``error-message`` extension.
        Defaults to the class's ``default_message``.

    Attributes
    ----------
    message : str
        Raw failure description.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.UNEXPECTED_ERROR
    default_message: ClassVar[str] = "The request failed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def error_kind(self) -> ErrorKind:
        """Kind the failure renders as; differs from ``kind`` only for :class:`ResultError`."""
        return self.to_variant().kind

    def to_variant(self) -> ProblemVariant:
        """Return the typed variant describing this failure.

        The base class renders as an unexpected error carrying :attr:`message`.
        """
        return UnexpectedProblem(description=self.message)


class BadRequestError(ProblemFailure):
    """The request is malformed."""

    kind = ErrorKind.BAD_REQUEST
    default_message = "The request is invalid."

    def to_variant(self) -> ProblemVariant:
        return BadRequestProblem(description=self.message)


class ForbiddenError(ProblemFailure):
    """The caller may not access the requested resource."""

    kind = ErrorKind.FORBIDDEN
    default_message = "Access to the requested resource is forbidden."

    def to_variant(self) -> ProblemVariant:
        return ForbiddenProblem(description=self.message)


class UnauthorizedError(ProblemFailure):
    """The caller is not authenticated for ``resource``.

    Parameters
    ----------
    resource : str | None, optional
        Resource the caller tried to reach. Defaults to the request instance
        when rendered.
    message : str | None, optional
        Raw failure description.
    """

    kind = ErrorKind.UNAUTHORIZED
    default_message = "Authentication is required."

    def __init__(self, resource: str | None = None, message: str | None = None) -> None:
        super().__init__(message)
        self.resource = resource

    def to_variant(self) -> ProblemVariant:
        return UnauthorizedProblem(description=self.message, resource=self.resource or "")


class ResourceNotFoundError(ProblemFailure):
    """No ``resource`` has ``property_name`` equal to ``property_value``.

    Parameters
    ----------
    resource : str
        Resource name, e.g. ``"User"``.
    property_name : str
        Property that was searched on, e.g. ``"id"``.
    property_value : object
        Searched value; rendered with :func:`str`.
    message : str | None, optional
        Raw failure description. Defaults to a sentence naming all three.
    """

    kind = ErrorKind.RESOURCE_NOT_FOUND

    def __init__(
        self,
        resource: str,
        property_name: str,
        property_value: object,
        message: str | None = None,
    ) -> None:
        self.resource = resource
        self.property_name = property_name
        self.property_value = _value_text(property_value)
        super().__init__(
            message
            or f"{resource} with {property_name} '{self.property_value}' was not found."
        )

    def to_variant(self) -> ProblemVariant:
        return ResourceNotFoundProblem(
            description=self.message,
            resource=self.resource,
            property_name=self.property_name,
            property_value=self.property_value,
        )


class ResourceAlreadyExistsError(ProblemFailure):
    """A ``resource`` with ``property_name`` equal to ``property_value`` exists."""

    kind = ErrorKind.RESOURCE_ALREADY_EXISTS

    def __init__(
        self,
        resource: str,
        property_name: str,
        property_value: object,
        message: str | None = None,
    ) -> None:
        self.resource = resource
        self.property_name = property_name
        self.property_value = _value_text(property_value)
        super().__init__(
            message
            or f"{resource} with {property_name} '{self.property_value}' already exists."
        )

    def to_variant(self) -> ProblemVariant:
        return ResourceAlreadyExistsProblem(
            description=self.message,
            resource=self.resource,
            property_name=self.property_name,
            property_value=self.property_value,
        )


class ResourceCreateFailedError(ProblemFailure):
    """Creating ``resource`` failed.

    Parameters
    ----------
    resource : str
        Resource name.
    new_resource : object, optional
        The rejected payload, echoed as ``new-resource``.
    reasons : Iterable[str], optional
        Ordered failure reasons.
    message : str | None, optional
        Raw failure description.
    """

    kind = ErrorKind.RESOURCE_CREATE_FAILED

    def __init__(
        self,
        resource: str,
        new_resource: object = None,
        reasons: Iterable[str] = (),
        message: str | None = None,
    ) -> None:
        self.resource = resource
        self.new_resource = new_resource
        self.reasons = tuple(reasons)
        super().__init__(message or f"Creating {resource} failed.")

    def to_variant(self) -> ProblemVariant:
        return ResourceCreateFailedProblem(
            description=self.message,
            resource=self.resource,
            new_resource=self.new_resource,
            reasons=self.reasons,
        )


class ResourceUpdateFailedError(ProblemFailure):
    """Updating ``resource`` failed."""

    kind = ErrorKind.RESOURCE_UPDATE_FAILED

    def __init__(
        self,
        resource: str,
        updated_resource: object = None,
        reasons: Iterable[str] = (),
        message: str | None = None,
    ) -> None:
        self.resource = resource
        self.updated_resource = updated_resource
        self.reasons = tuple(reasons)
        super().__init__(message or f"Updating {resource} failed.")

    def to_variant(self) -> ProblemVariant:
        return ResourceUpdateFailedProblem(
            description=self.message,
            resource=self.resource,
            updated_resource=self.updated_resource,
            reasons=self.reasons,
        )


class ResourcePatchFailedError(ProblemFailure):
    """Applying ``patches`` to ``resource`` failed.

    Parameters
    ----------
    resource : str
        Resource name.
    patches : Mapping[str, str | None], optional
        Patched property to new value (``None`` clears the property).
    message : str | None, optional
        Raw failure description.
    """

    kind = ErrorKind.RESOURCE_PATCH_FAILED

    def __init__(
        self,
        resource: str,
        patches: Mapping[str, str | None] | None = None,
        message: str | None = None,
    ) -> None:
        self.resource = resource
        self.patches: Mapping[str, str | None] = MappingProxyType(dict(patches or {}))
        super().__init__(message or f"Patching {resource} failed.")

    def to_variant(self) -> ProblemVariant:
        return ResourcePatchFailedProblem(
            description=self.message, resource=self.resource, patches=self.patches
        )


class ResourceDeleteFailedError(ProblemFailure):
    """Deleting ``resource`` failed."""

    kind = ErrorKind.RESOURCE_DELETE_FAILED

    def __init__(
        self,
        resource: str,
        reasons: Iterable[str] = (),
        message: str | None = None,
    ) -> None:
        self.resource = resource
        self.reasons = tuple(reasons)
        super().__init__(message or f"Deleting {resource} failed.")

    def to_variant(self) -> ProblemVariant:
        return ResourceDeleteFailedProblem(
            description=self.message, resource=self.resource, reasons=self.reasons
        )


class ValidationFailedError(ProblemFailure):
    """Request validation produced ``failures``.

    Parameters
    ----------
    failures : Iterable[ValidationFailure]
        Failures in the order the validator reported them.
    message : str | None, optional
        Raw failure description.
    """

    kind = ErrorKind.VALIDATION_FAILED

    def __init__(
        self, failures: Iterable[ValidationFailure], message: str | None = None
    ) -> None:
        self.failures = tuple(failures)
        super().__init__(message or f"{len(self.failures)} validation failure(s) occurred.")

    def to_variant(self) -> ProblemVariant:
        return ValidationFailedProblem(description=self.message, failures=self.failures)


class TaskCancelledError(ProblemFailure):
    """The task named ``task`` was cancelled.

    Parameters
    ----------
    task : str | None, optional
        Task description. Defaults to the request instance when rendered.
    message : str | None, optional
        Raw failure description.
    """

    kind = ErrorKind.TASK_CANCELLED
    default_message = "The operation was cancelled."

    def __init__(self, task: str | None = None, message: str | None = None) -> None:
        super().__init__(message)
        self.task = task

    def to_variant(self) -> ProblemVariant:
        return TaskCancelledProblem(description=self.message, task=self.task or "")


class ResultError(ProblemFailure):
    """Carry a :class:`StructuredError` through exception-based control flow.

    Parameters
    ----------
    error : StructuredError
        The structured failure.

    Notes
    -----
    The class-level ``kind`` stays ``UNEXPECTED_ERROR``; :attr:`error_kind`
    reports the kind of the carried error, or ``UNEXPECTED_ERROR`` when that
    kind is unknown.
    """

    def __init__(self, error: StructuredError) -> None:
        self.error = error
        super().__init__(error.description or None)

    def to_variant(self) -> ProblemVariant:
        return variant_from_structured(self.error)
