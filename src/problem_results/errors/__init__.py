"""Error kinds, classification registry and engine exceptions.

Examples
--------
>>> from problem_results.errors import ErrorKind, classification_for
>>> classification_for(ErrorKind.TASK_CANCELLED).status
499
"""

from __future__ import annotations

from problem_results.errors.codes import (
    BASE_TYPE_URI,
    CLASSIFICATIONS,
    CLIENT_CLOSED_REQUEST,
    ClassificationEntry,
    ErrorKind,
    classification_for,
    coerce_error_kind,
    get_type_uri,
)
from problem_results.errors.exceptions import (
    CatalogLoadError,
    EngineErrorCode,
    InvalidParameterError,
    ProblemResultsError,
    SettingsError,
    UnsupportedErrorKindError,
)

__all__ = [
    "BASE_TYPE_URI",
    "CLASSIFICATIONS",
    "CLIENT_CLOSED_REQUEST",
    "CatalogLoadError",
    "ClassificationEntry",
    "EngineErrorCode",
    "ErrorKind",
    "InvalidParameterError",
    "ProblemResultsError",
    "SettingsError",
    "UnsupportedErrorKindError",
    "classification_for",
    "coerce_error_kind",
    "get_type_uri",
]
