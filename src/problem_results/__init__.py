"""Render request failures as localized RFC 9457 problem documents.

The FastAPI integration lives in :mod:`problem_results.errors.http` and is
not imported here.
"""

from __future__ import annotations

from problem_results.dispatcher import ProblemDispatcher, to_problem
from problem_results.errors import (
    ErrorKind,
    InvalidParameterError,
    ProblemResultsError,
    UnsupportedErrorKindError,
    classification_for,
)
from problem_results.failures import (
    BadRequestError,
    ForbiddenError,
    ProblemFailure,
    ResourceAlreadyExistsError,
    ResourceCreateFailedError,
    ResourceDeleteFailedError,
    ResourceNotFoundError,
    ResourcePatchFailedError,
    ResourceUpdateFailedError,
    ResultError,
    TaskCancelledError,
    UnauthorizedError,
    ValidationFailedError,
)
from problem_results.problem_details import (
    ProblemDocument,
    RequestInfo,
    assemble,
    render_problem,
    validate_problem_details,
)
from problem_results.translation import (
    CatalogTranslator,
    DefaultTranslator,
    ProblemMessages,
    Translator,
    load_bundled_catalogs,
    load_catalogs,
)
from problem_results.validation import ValidationFailure, group_failures
from problem_results.variants import StructuredError

__all__ = [
    "BadRequestError",
    "CatalogTranslator",
    "DefaultTranslator",
    "ErrorKind",
    "ForbiddenError",
    "InvalidParameterError",
    "ProblemDispatcher",
    "ProblemDocument",
    "ProblemFailure",
    "ProblemMessages",
    "ProblemResultsError",
    "RequestInfo",
    "ResourceAlreadyExistsError",
    "ResourceCreateFailedError",
    "ResourceDeleteFailedError",
    "ResourceNotFoundError",
    "ResourcePatchFailedError",
    "ResourceUpdateFailedError",
    "ResultError",
    "StructuredError",
    "TaskCancelledError",
    "Translator",
    "UnauthorizedError",
    "UnsupportedErrorKindError",
    "ValidationFailedError",
    "ValidationFailure",
    "assemble",
    "classification_for",
    "group_failures",
    "load_bundled_catalogs",
    "load_catalogs",
    "render_problem",
    "to_problem",
    "validate_problem_details",
]
