"""RFC 9457 problem documents: assembly, schema validation and rendering.

:func:`assemble` is the single constructor used by the dispatcher. It takes
an already-resolved title and detail, looks up ``type`` and ``status`` from
the classification registry, and merges the mandatory extension keys with the
kind-specific ones. Mandatory keys always win on a name clash.

Serialized documents validate against the bundled JSON Schema 2020-12 file
``resources/schema/problem_details.json``.

Examples
--------
>>> from problem_results.errors.codes import ErrorKind
>>> from problem_results.problem_details import (
...     RequestInfo,
...     assemble,
...     mandatory_extensions,
...     render_problem,
... )
>>> request = RequestInfo(method="GET", path="/users/42", trace_id="req-1")
>>> document = assemble(
...     ErrorKind.FORBIDDEN,
...     "Access forbidden!",
...     "Unfortunately, you do not have access to the requested resource.",
...     request.instance,
...     mandatory_extensions("req-1", ErrorKind.FORBIDDEN, "role 'viewer' lacks 'write'"),
...     {},
... )
>>> document.status
403
>>> '"traceId": "req-1"' in render_problem(document)
True
"""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from enum import StrEnum
from importlib import resources
from types import MappingProxyType
from typing import TYPE_CHECKING, Final, cast

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError, ValidationError
from pydantic import BaseModel

from problem_results.errors.codes import classification_for

if TYPE_CHECKING:
    from collections.abc import Mapping

    from problem_results.errors.codes import ErrorKind
    from problem_results.types import JsonObject, JsonValue

__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "ExtensionKey",
    "ProblemDetailsValidationError",
    "ProblemDocument",
    "RequestInfo",
    "assemble",
    "mandatory_extensions",
    "render_problem",
    "validate_problem_details",
]

PROBLEM_MEDIA_TYPE: Final[str] = "application/problem+json"


class ExtensionKey(StrEnum):
    """Names of the extension members problem documents may carry."""

    TRACE_ID = "traceId"
    ERROR_CODE = "error-code"
    ERROR_MESSAGE = "error-message"
    RESOURCE = "resource"
    PROPERTY_NAME = "property-name"
    PROPERTY_VALUE = "property-value"
    NEW_RESOURCE = "new-resource"
    UPDATED_RESOURCE = "updated-resource"
    REASONS = "reasons"
    PATCHES = "patches"
    ERRORS = "errors"


class ProblemDetailsValidationError(Exception):
    """Raised when a serialized problem document fails schema validation.

    Parameters
    ----------
    message : str
        Human-readable error message describing the validation failure.
    validation_errors : list[str] | None, optional
        Specific messages from the schema validator. Defaults to None.

    Attributes
    ----------
    validation_errors : list[str]
        Validator messages (empty list if not provided).
    """

    def __init__(self, message: str, validation_errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.validation_errors = validation_errors or []


@dataclass(frozen=True, slots=True)
class RequestInfo:
    """Request metadata supplied by the HTTP layer.

    Attributes
    ----------
    method : str
        HTTP method, e.g. ``"GET"``.
    path : str
        Request path.
    protocol : str
        Protocol string, e.g. ``"HTTP/1.1"``.
    trace_id : str
        Per-request correlation identifier.
    """

    method: str
    path: str
    protocol: str = "HTTP/1.1"
    trace_id: str = ""

    @property
    def instance(self) -> str:
        """Request descriptor used as the problem ``instance``."""
        return f"{self.protocol} {self.method} {self.path}"


@dataclass(frozen=True, slots=True)
class ProblemDocument:
    """An immutable RFC 9457 problem document.

    Attributes
    ----------
    type : str
        Classification URI of the problem.
    title : str
        Localized short summary.
    detail : str
        Localized explanation of this occurrence.
    status : int
        HTTP status code.
    instance : str
        Request descriptor.
    extensions : Mapping[str, object]
        Read-only, ordered extension members.
    """

    type: str
    title: str
    detail: str
    status: int
    instance: str
    extensions: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        if not isinstance(self.extensions, MappingProxyType):
            object.__setattr__(self, "extensions", MappingProxyType(dict(self.extensions)))

    def to_payload(self) -> JsonObject:
        """Return the JSON-compatible representation of the document."""
        return {
            "type": self.type,
            "title": self.title,
            "status": self.status,
            "detail": self.detail,
            "instance": self.instance,
            "extensions": {key: _to_json(value) for key, value in self.extensions.items()},
        }


def _to_json(value: object) -> JsonValue:
    """Convert extension values to JSON-compatible structures."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    to_payload = getattr(value, "to_payload", None)
    if callable(to_payload):
        return cast("JsonValue", to_payload())
    if isinstance(value, BaseModel):
        return cast("JsonValue", value.model_dump(mode="json"))
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _to_json(dataclasses.asdict(value))
    if isinstance(value, dict) or hasattr(value, "items"):
        items = cast("Mapping[object, object]", value).items()
        return {str(key): _to_json(item) for key, item in items}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_json(item) for item in value]
    return str(value)


def mandatory_extensions(trace_id: str, kind: ErrorKind, error_message: str) -> dict[str, object]:
    """Return the extension members every problem document carries.

    Parameters
    ----------
    trace_id : str
        Request trace identifier.
    kind : ErrorKind
        Rendered error kind; its value becomes ``error-code``.
    error_message : str
        Raw, non-localized failure description.

    Returns
    -------
    dict[str, object]
        ``traceId``, ``error-code`` and ``error-message`` in that order.
    """
    return {
        ExtensionKey.TRACE_ID.value: trace_id,
        ExtensionKey.ERROR_CODE.value: kind.value,
        ExtensionKey.ERROR_MESSAGE.value: error_message,
    }


def assemble(
    kind: ErrorKind,
    title: str,
    detail: str,
    instance: str,
    base_extensions: Mapping[str, object],
    extra_extensions: Mapping[str, object],
    *,
    status: int | None = None,
) -> ProblemDocument:
    """Build a :class:`ProblemDocument` for ``kind``.

    Parameters
    ----------
    kind : ErrorKind
        Registered error kind; provides ``type`` and the default ``status``.
    title : str
        Resolved title.
    detail : str
        Resolved detail.
    instance : str
        Request descriptor.
    base_extensions : Mapping[str, object]
        Mandatory members (see :func:`mandatory_extensions`).
    extra_extensions : Mapping[str, object]
        Kind-specific members. A key already present in ``base_extensions``
        is ignored.
    status : int | None, optional
        Explicit status overriding the registry value. Defaults to None.

    Returns
    -------
    ProblemDocument
        The new document.

    Raises
    ------
    UnsupportedErrorKindError
        If ``kind`` is not registered.
    """
    entry = classification_for(kind)
    extensions = dict(base_extensions)
    for key, value in extra_extensions.items():
        extensions.setdefault(key, value)
    return ProblemDocument(
        type=entry.type_uri,
        title=title,
        detail=detail,
        status=entry.status if status is None else status,
        instance=instance,
        extensions=MappingProxyType(extensions),
    )


_SCHEMA_CACHE: dict[str, Draft202012Validator] = {}


def _load_validator() -> Draft202012Validator:
    cached = _SCHEMA_CACHE.get("problem_details")
    if cached is not None:
        return cached

    schema_file = resources.files("problem_results") / "resources" / "schema" / "problem_details.json"
    try:
        schema: dict[str, object] = json.loads(schema_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        msg = f"Failed to load problem document schema: {exc}"
        raise ProblemDetailsValidationError(msg) from exc

    try:
        Draft202012Validator.check_schema(schema)
    except SchemaError as exc:
        msg = f"Invalid problem document schema: {exc.message}"
        raise ProblemDetailsValidationError(msg) from exc

    validator = Draft202012Validator(schema)
    _SCHEMA_CACHE["problem_details"] = validator
    return validator


def validate_problem_details(payload: ProblemDocument | Mapping[str, object]) -> None:
    """Validate a problem document against the bundled schema.

    Parameters
    ----------
    payload : ProblemDocument | Mapping[str, object]
        A document, or its serialized payload.

    Raises
    ------
    ProblemDetailsValidationError
        If the payload violates the schema.
    """
    instance = payload.to_payload() if isinstance(payload, ProblemDocument) else payload
    validator = _load_validator()
    try:
        validator.validate(instance)
    except ValidationError as exc:
        errors = [exc.message]
        if exc.absolute_path:
            path_str = ".".join(str(p) for p in exc.absolute_path)
            errors.append(f"at path: {path_str}")
        msg = f"Problem document validation failed: {'; '.join(errors)}"
        raise ProblemDetailsValidationError(msg, validation_errors=errors) from exc


def render_problem(problem: ProblemDocument | Mapping[str, object]) -> str:
    """Render a problem document as JSON.

    The output is minified, keeps non-ASCII characters, and has no trailing
    newline.
    """
    payload = problem.to_payload() if isinstance(problem, ProblemDocument) else problem
    return json.dumps(payload, default=str, ensure_ascii=False)
