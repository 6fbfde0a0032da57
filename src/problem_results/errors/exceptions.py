"""Failures raised by the problem_results engine itself.

These are not the failures the engine *renders*; those are described by
:class:`~problem_results.errors.codes.ErrorKind`. The exceptions below signal a
defect in how the engine was called or configured.

Examples
--------
>>> from problem_results.errors import InvalidParameterError
>>> try:
...     raise InvalidParameterError("Resource cannot be blank.", parameter="resource")
... except InvalidParameterError as e:
...     assert e.parameter == "resource"
...     assert e.code == "invalid-parameter"
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = [
    "CatalogLoadError",
    "EngineErrorCode",
    "InvalidParameterError",
    "ProblemResultsError",
    "SettingsError",
    "UnsupportedErrorKindError",
]


class EngineErrorCode(StrEnum):
    """Stable codes identifying engine failures in logs."""

    UNSUPPORTED_ERROR_KIND = "unsupported-error-kind"
    INVALID_PARAMETER = "invalid-parameter"
    CONFIGURATION_ERROR = "configuration-error"
    CATALOG_LOAD_ERROR = "catalog-load-error"

    def __str__(self) -> str:
        return self.value


class ProblemResultsError(Exception):
    """Base exception for all engine failures.

    Parameters
    ----------
    message : str
        Human-readable error message.
    code : EngineErrorCode, optional
        Engine error code. Subclasses fix their own.
    cause : BaseException | None, optional
        Underlying exception, stored as ``__cause__``.
    context : Mapping[str, object] | None, optional
        Structured details for logging.

    Attributes
    ----------
    message : str
        Human-readable error message.
    code : EngineErrorCode
        Engine error code.
    context : dict[str, object]
        Structured details (empty when none were given).
    """

    default_code: EngineErrorCode = EngineErrorCode.CONFIGURATION_ERROR

    def __init__(
        self,
        message: str,
        *,
        code: EngineErrorCode | None = None,
        cause: BaseException | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.context: dict[str, object] = dict(context) if context else {}
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        """Return the bare message.

        The dispatcher copies ``str(exc)`` into the ``error-message``
        extension, so no decoration is added here.
        """
        return self.message


class UnsupportedErrorKindError(ProblemResultsError, LookupError):
    """An error kind outside the registered set was looked up.

    Always a programming defect. The dispatcher recovers from it by rendering
    an unexpected-error document, so it never reaches API callers.

    Parameters
    ----------
    message : str
        Human-readable error message.
    kind : object
        The rejected value.
    """

    default_code = EngineErrorCode.UNSUPPORTED_ERROR_KIND

    def __init__(self, message: str, *, kind: object) -> None:
        super().__init__(message, context={"kind": repr(kind)})
        self.kind = kind


class InvalidParameterError(ProblemResultsError, ValueError):
    """A message parameter was blank or out of range.

    Raised before translation so a broken sentence such as
    ``"resource '' was not found"`` is never produced.

    Parameters
    ----------
    message : str
        Human-readable error message.
    parameter : str
        Name of the offending parameter.
    """

    default_code = EngineErrorCode.INVALID_PARAMETER

    def __init__(self, message: str, *, parameter: str) -> None:
        super().__init__(message, context={"parameter": parameter})
        self.parameter = parameter


class SettingsError(ProblemResultsError):
    """Settings failed validation while loading."""

    default_code = EngineErrorCode.CONFIGURATION_ERROR


class CatalogLoadError(ProblemResultsError):
    """A translation catalog could not be read or is malformed."""

    default_code = EngineErrorCode.CATALOG_LOAD_ERROR
