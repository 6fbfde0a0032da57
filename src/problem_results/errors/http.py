"""FastAPI adapters producing ``application/problem+json`` responses.

:func:`register_problem_details_handlers` installs exception handlers that
turn typed failures, request validation errors and any other exception into
localized problem documents rendered by a shared
:class:`~problem_results.dispatcher.ProblemDispatcher`.

Examples
--------
>>> from fastapi import FastAPI
>>> from problem_results.errors.http import register_problem_details_handlers
>>> app = FastAPI()
>>> dispatcher = register_problem_details_handlers(app)
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import TYPE_CHECKING

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from problem_results.dispatcher import ProblemDispatcher
from problem_results.errors.exceptions import InvalidParameterError
from problem_results.failures import BadRequestError, ProblemFailure, ValidationFailedError
from problem_results.logging import get_logger, setup_logging, with_fields
from problem_results.problem_details import (
    PROBLEM_MEDIA_TYPE,
    RequestInfo,
    validate_problem_details,
)
from problem_results.settings import build_translator, load_settings
from problem_results.validation import failures_from_pydantic
from problem_results.variants import UnexpectedProblem

if TYPE_CHECKING:
    from collections.abc import Callable

    from fastapi import FastAPI, Request

    from problem_results.problem_details import ProblemDocument
    from problem_results.settings import ProblemResultsSettings
    from problem_results.translation import Translator

__all__ = [
    "problem_details_response",
    "register_problem_details_handlers",
    "request_info_from_request",
]

logger = get_logger(__name__)

type LocaleProvider = Callable[[Request], str | None]


def request_info_from_request(
    request: Request, *, trace_header: str = "X-Request-ID"
) -> RequestInfo:
    """Build :class:`RequestInfo` from a FastAPI request.

    Parameters
    ----------
    request : Request
        Incoming request.
    trace_header : str, optional
        Header carrying the caller's trace id. A new UUID is generated when
        the header is absent. Defaults to ``"X-Request-ID"``.

    Returns
    -------
    RequestInfo
        Method, path, protocol and trace id of ``request``.
    """
    http_version = request.scope.get("http_version") or "1.1"
    trace_id = request.headers.get(trace_header) or uuid.uuid4().hex
    return RequestInfo(
        method=request.method,
        path=request.url.path,
        protocol=f"HTTP/{http_version}",
        trace_id=trace_id,
    )


def problem_details_response(
    document: ProblemDocument, *, validate: bool = True
) -> JSONResponse:
    """Convert a problem document to a JSON response.

    Parameters
    ----------
    document : ProblemDocument
        Rendered document.
    validate : bool, optional
        Validate the payload against the bundled JSON Schema first.
        Defaults to True.

    Returns
    -------
    JSONResponse
        Response with the document's status and the
        ``application/problem+json`` media type.

    Raises
    ------
    ProblemDetailsValidationError
        If ``validate`` is set and the payload violates the schema.
    """
    payload = document.to_payload()
    if validate:
        validate_problem_details(payload)
    return JSONResponse(
        status_code=document.status,
        content=payload,
        media_type=PROBLEM_MEDIA_TYPE,
    )


def register_problem_details_handlers(
    app: FastAPI,
    *,
    translator: Translator | None = None,
    settings: ProblemResultsSettings | None = None,
    locale_provider: LocaleProvider | None = None,
    configure_logging: bool = False,
) -> ProblemDispatcher:
    """Register problem document handlers on ``app``.

    Handles :class:`~problem_results.failures.ProblemFailure`,
    :class:`fastapi.exceptions.RequestValidationError` (rendered as a
    validation failure, or as a bad request when it lists no errors) and
    every other :class:`Exception` (rendered as an unexpected error).

    Parameters
    ----------
    app : FastAPI
        Application to configure.
    translator : Translator | None, optional
        Message resolver. Defaults to the catalogs named by ``settings``.
    settings : ProblemResultsSettings | None, optional
        Configuration. Defaults to :func:`~problem_results.settings.load_settings`.
    locale_provider : LocaleProvider | None, optional
        Returns the locale requested by a request, or ``None``. Unsupported
        or missing locales fall back to ``settings.default_locale``.
    configure_logging : bool, optional
        Install JSON logging on the root logger at ``settings.log_level``
        (see :func:`~problem_results.logging.setup_logging`). Defaults to
        False.

    Returns
    -------
    ProblemDispatcher
        The dispatcher shared by all handlers.
    """
    config = settings or load_settings()
    if configure_logging:
        setup_logging(config.log_level)
    dispatcher = ProblemDispatcher(translator or build_translator(config))

    def _respond(request: Request, error: BaseException, operation: str) -> JSONResponse:
        info = request_info_from_request(request, trace_header=config.trace_header)
        requested = locale_provider(request) if locale_provider is not None else None
        locale = config.resolve_locale(requested)
        with with_fields(logger, trace_id=info.trace_id, operation=operation) as log:
            start = time.perf_counter()
            try:
                document = dispatcher.dispatch(error, locale, info)
            except InvalidParameterError as exc:
                log.exception(
                    "Problem parameters invalid",
                    extra={"parameter": exc.parameter, "error_type": type(error).__name__},
                )
                document = dispatcher.render(
                    UnexpectedProblem(description=str(error)), locale, info
                )
            duration_ms = (time.perf_counter() - start) * 1000.0
            level = logging.ERROR if document.status >= 500 else logging.INFO
            log.log(
                level,
                "Problem rendered",
                extra={
                    "error_code": str(document.extensions.get("error-code", "")),
                    "http_status": document.status,
                    "locale": locale,
                    "duration_ms": duration_ms,
                },
                exc_info=error if document.status >= 500 else None,
            )
        return problem_details_response(document, validate=config.validate_payloads)

    async def _handle_failure(request: Request, exc: Exception) -> JSONResponse:
        return _respond(request, exc, "problem_failure_handler")

    async def _handle_validation(request: Request, exc: Exception) -> JSONResponse:
        failures = failures_from_pydantic(exc) if isinstance(exc, RequestValidationError) else ()
        error: ProblemFailure = (
            ValidationFailedError(failures) if failures else BadRequestError(str(exc) or None)
        )
        return _respond(request, error, "request_validation_handler")

    async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        return _respond(request, exc, "unexpected_error_handler")

    app.add_exception_handler(ProblemFailure, _handle_failure)
    app.add_exception_handler(RequestValidationError, _handle_validation)
    app.add_exception_handler(Exception, _handle_unexpected)
    return dispatcher
