"""Dispatch failures to localized problem documents.

The dispatcher is a stateless, total function from an error value to a
:class:`~problem_results.problem_details.ProblemDocument`. Inputs are
converted into the closed :data:`~problem_results.variants.ProblemVariant`
union first and then rendered by one ``match`` statement, so adding a kind
without a rendering branch fails type checking.

Locale is an explicit argument of every call; the dispatcher never reads it
from ambient state and keeps no per-request state, so one instance can serve
concurrent requests.

Examples
--------
>>> from problem_results.dispatcher import ProblemDispatcher
>>> from problem_results.failures import ResourceNotFoundError
>>> from problem_results.problem_details import RequestInfo
>>> dispatcher = ProblemDispatcher()
>>> request = RequestInfo(method="GET", path="/users/42", trace_id="req-1")
>>> document = dispatcher.dispatch(ResourceNotFoundError("User", "id", "42"), "en", request)
>>> document.status
404
>>> document.extensions["property-value"]
'42'
"""

from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

from problem_results.errors.codes import CLIENT_CLOSED_REQUEST
from problem_results.errors.exceptions import UnsupportedErrorKindError
from problem_results.problem_details import (
    ExtensionKey,
    assemble,
    mandatory_extensions,
)
from problem_results.translation import DefaultTranslator, ProblemMessages
from problem_results.validation import group_failures
from problem_results.variants import (
    BadRequestProblem,
    ForbiddenProblem,
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
    variant_from_exception,
    variant_from_structured,
)

if TYPE_CHECKING:
    from problem_results.problem_details import ProblemDocument, RequestInfo
    from problem_results.translation import Translator
    from problem_results.variants import ProblemVariant

__all__ = ["ProblemDispatcher", "to_problem"]

_VARIANT_TYPES = (
    BadRequestProblem,
    ForbiddenProblem,
    UnauthorizedProblem,
    ResourceNotFoundProblem,
    ResourceAlreadyExistsProblem,
    ResourceCreateFailedProblem,
    ResourceUpdateFailedProblem,
    ResourcePatchFailedProblem,
    ResourceDeleteFailedProblem,
    ValidationFailedProblem,
    TaskCancelledProblem,
    UnexpectedProblem,
)


class ProblemDispatcher:
    """Render failures as problem documents.

    Parameters
    ----------
    translator : Translator | None, optional
        Resolver for titles and details. Defaults to
        :class:`~problem_results.translation.DefaultTranslator`, which always
        renders the English defaults.
    """

    def __init__(self, translator: Translator | None = None) -> None:
        self._messages = ProblemMessages(translator or DefaultTranslator())

    @property
    def messages(self) -> ProblemMessages:
        """Message resolver used for titles and details."""
        return self._messages

    def dispatch(
        self,
        error: BaseException | StructuredError | ProblemVariant,
        locale: str,
        request: RequestInfo,
    ) -> ProblemDocument:
        """Render ``error`` for ``locale``.

        Parameters
        ----------
        error : BaseException | StructuredError | ProblemVariant
            Raised exception, structured result error, or an already typed
            variant.
        locale : str
            Locale used to resolve title and detail.
        request : RequestInfo
            Metadata of the failing request.

        Returns
        -------
        ProblemDocument
            The rendered document.

        Raises
        ------
        InvalidParameterError
            If a message parameter carried by ``error`` is blank, or a
            validation failure carries no failures.
        """
        return self.render(_to_variant(error), locale, request)

    def dispatch_result(
        self,
        error: BaseException | StructuredError | ProblemVariant | None,
        locale: str,
        request: RequestInfo,
    ) -> ProblemDocument | None:
        """Like :meth:`dispatch`, returning ``None`` for a successful result."""
        if error is None:
            return None
        return self.dispatch(error, locale, request)

    def render(
        self, variant: ProblemVariant, locale: str, request: RequestInfo
    ) -> ProblemDocument:
        """Render a typed variant.

        A kind missing from the classification registry renders as an
        unexpected error carrying the registry's message.
        """
        try:
            return self._render(variant, locale, request)
        except UnsupportedErrorKindError as exc:
            return self._render(UnexpectedProblem(description=str(exc)), locale, request)

    def _render(
        self, variant: ProblemVariant, locale: str, request: RequestInfo
    ) -> ProblemDocument:
        messages = self._messages
        instance = request.instance
        base = mandatory_extensions(request.trace_id, variant.kind, variant.description)
        extra: dict[str, object] = {}
        status: int | None = None

        match variant:
            case BadRequestProblem():
                title = messages.bad_request_title(locale)
                detail = messages.bad_request(locale, request.method, request.path)
            case ForbiddenProblem():
                title = messages.forbidden_title(locale)
                detail = messages.forbidden(locale)
                extra[ExtensionKey.RESOURCE] = instance
            case UnauthorizedProblem(resource=resource):
                resource = resource or instance
                title = messages.unauthorized_title(locale)
                detail = messages.unauthorized(locale, resource)
                extra[ExtensionKey.RESOURCE] = resource
            case ResourceNotFoundProblem(
                resource=resource, property_name=name, property_value=value
            ):
                title = messages.resource_not_found_title(locale)
                detail = messages.resource_not_found(locale, resource, name, value)
                extra.update(_property_extensions(resource, name, value))
            case ResourceAlreadyExistsProblem(
                resource=resource, property_name=name, property_value=value
            ):
                title = messages.resource_already_exists_title(locale)
                detail = messages.resource_already_exists(locale, resource, name, value)
                extra.update(_property_extensions(resource, name, value))
            case ResourceCreateFailedProblem(
                resource=resource, new_resource=new_resource, reasons=reasons
            ):
                title = messages.resource_create_failed_title(locale)
                detail = messages.resource_create_failed(locale, resource)
                extra[ExtensionKey.RESOURCE] = resource
                extra[ExtensionKey.NEW_RESOURCE] = new_resource
                extra[ExtensionKey.REASONS] = list(reasons)
            case ResourceUpdateFailedProblem(
                resource=resource, updated_resource=updated_resource, reasons=reasons
            ):
                title = messages.resource_update_failed_title(locale)
                detail = messages.resource_update_failed(locale, resource)
                extra[ExtensionKey.RESOURCE] = resource
                extra[ExtensionKey.UPDATED_RESOURCE] = updated_resource
                extra[ExtensionKey.REASONS] = list(reasons)
            case ResourcePatchFailedProblem(resource=resource, patches=patches):
                title = messages.resource_patch_failed_title(locale)
                detail = messages.resource_patch_failed(locale, resource)
                extra[ExtensionKey.RESOURCE] = resource
                extra[ExtensionKey.PATCHES] = dict(patches)
            case ResourceDeleteFailedProblem(resource=resource, reasons=reasons):
                title = messages.resource_delete_failed_title(locale)
                detail = messages.resource_delete_failed(locale, resource)
                extra[ExtensionKey.RESOURCE] = resource
                extra[ExtensionKey.REASONS] = list(reasons)
            case ValidationFailedProblem(failures=failures):
                title = messages.validation_errors_title(locale)
                detail = messages.validation_errors(locale, len(failures))
                extra[ExtensionKey.ERRORS] = list(group_failures(failures))
            case TaskCancelledProblem(task=task):
                title = messages.task_cancelled_title(locale)
                detail = messages.task_cancelled(locale, task or instance)
                status = CLIENT_CLOSED_REQUEST
            case UnexpectedProblem():
                title = messages.unexpected_error_title(locale)
                detail = messages.unexpected_error(locale)
            case _:
                assert_never(variant)

        return assemble(
            variant.kind,
            title,
            detail,
            instance,
            base,
            {str(key): value for key, value in extra.items()},
            status=status,
        )


def _property_extensions(resource: str, name: str, value: str) -> dict[str, object]:
    return {
        ExtensionKey.RESOURCE: resource,
        ExtensionKey.PROPERTY_NAME: name,
        ExtensionKey.PROPERTY_VALUE: value,
    }


def _to_variant(error: BaseException | StructuredError | ProblemVariant) -> ProblemVariant:
    if isinstance(error, StructuredError):
        return variant_from_structured(error)
    if isinstance(error, BaseException):
        return variant_from_exception(error)
    if isinstance(error, _VARIANT_TYPES):
        return error
    return UnexpectedProblem(description=str(error))


def to_problem(
    error: BaseException | StructuredError | ProblemVariant,
    locale: str,
    request: RequestInfo,
    *,
    translator: Translator | None = None,
) -> ProblemDocument:
    """Render ``error`` with a throwaway :class:`ProblemDispatcher`."""
    return ProblemDispatcher(translator).dispatch(error, locale, request)

