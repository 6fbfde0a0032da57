"""Message keys and default-language templates for problem documents.

Every user-facing title and detail has one :class:`MessageKey` and one
English default template. Templates use positional :meth:`str.format`
placeholders (``{0}``, ``{1}`` ...) so translated catalogs can reorder them.

The table is built once at import time and is read-only.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = [
    "MESSAGE_TEMPLATES",
    "MessageKey",
    "MessageTemplate",
    "template_for",
]


class MessageKey(StrEnum):
    """Catalog keys of all problem titles and details."""

    BAD_REQUEST = "BAD_REQUEST"
    BAD_REQUEST_TITLE = "BAD_REQUEST_TITLE"
    FORBIDDEN = "FORBIDDEN"
    FORBIDDEN_TITLE = "FORBIDDEN_TITLE"
    RESOURCE_ALREADY_EXISTS = "RESOURCE_ALREADY_EXISTS"
    RESOURCE_ALREADY_EXISTS_TITLE = "RESOURCE_ALREADY_EXISTS_TITLE"
    RESOURCE_CREATE_FAILED = "RESOURCE_CREATE_FAILED"
    RESOURCE_CREATE_FAILED_TITLE = "RESOURCE_CREATE_FAILED_TITLE"
    RESOURCE_DELETE_FAILED = "RESOURCE_DELETE_FAILED"
    RESOURCE_DELETE_FAILED_TITLE = "RESOURCE_DELETE_FAILED_TITLE"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_NOT_FOUND_TITLE = "RESOURCE_NOT_FOUND_TITLE"
    RESOURCE_PATCH_FAILED = "RESOURCE_PATCH_FAILED"
    RESOURCE_PATCH_FAILED_TITLE = "RESOURCE_PATCH_FAILED_TITLE"
    RESOURCE_UPDATE_FAILED = "RESOURCE_UPDATE_FAILED"
    RESOURCE_UPDATE_FAILED_TITLE = "RESOURCE_UPDATE_FAILED_TITLE"
    UNAUTHORIZED = "UNAUTHORIZED"
    UNAUTHORIZED_TITLE = "UNAUTHORIZED_TITLE"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"
    UNEXPECTED_ERROR_TITLE = "UNEXPECTED_ERROR_TITLE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    VALIDATION_ERROR_TITLE = "VALIDATION_ERROR_TITLE"
    TASK_CANCELLED = "TASK_CANCELLED"
    TASK_CANCELLED_TITLE = "TASK_CANCELLED_TITLE"


@dataclass(frozen=True, slots=True)
class MessageTemplate:
    """A catalog key with its default-language template."""

    key: MessageKey
    default: str


def _template(key: MessageKey, default: str) -> tuple[MessageKey, MessageTemplate]:
    return key, MessageTemplate(key=key, default=default)


MESSAGE_TEMPLATES: Final[Mapping[MessageKey, MessageTemplate]] = MappingProxyType(
    dict(
        (
            _template(MessageKey.BAD_REQUEST, "Unfortunately, '{0}' '{1}' request is invalid."),
            _template(MessageKey.BAD_REQUEST_TITLE, "Bad request!"),
            _template(
                MessageKey.FORBIDDEN,
                "Unfortunately, you do not have access to the requested resource.",
            ),
            _template(MessageKey.FORBIDDEN_TITLE, "Access forbidden!"),
            _template(
                MessageKey.RESOURCE_ALREADY_EXISTS,
                "Unfortunately, an '{0}' with an '{1}' of '{2}' already exists.",
            ),
            _template(MessageKey.RESOURCE_ALREADY_EXISTS_TITLE, "Resource already exists!"),
            _template(
                MessageKey.RESOURCE_CREATE_FAILED,
                "Unfortunately, the create '{0}' resource request failed.",
            ),
            _template(MessageKey.RESOURCE_CREATE_FAILED_TITLE, "Resource creation failed!"),
            _template(
                MessageKey.RESOURCE_DELETE_FAILED,
                "Unfortunately, the delete '{0}' request failed.",
            ),
            _template(MessageKey.RESOURCE_DELETE_FAILED_TITLE, "Resource deletion failed!"),
            _template(
                MessageKey.RESOURCE_NOT_FOUND,
                "Unfortunately, an '{0}' with an '{1}' of '{2}' was not found.",
            ),
            _template(MessageKey.RESOURCE_NOT_FOUND_TITLE, "Resource not found!"),
            _template(
                MessageKey.RESOURCE_PATCH_FAILED,
                "Unfortunately, the patch '{0}' request failed.",
            ),
            _template(MessageKey.RESOURCE_PATCH_FAILED_TITLE, "Resource patch failed!"),
            _template(
                MessageKey.RESOURCE_UPDATE_FAILED,
                "Unfortunately, the update '{0}' request failed.",
            ),
            _template(MessageKey.RESOURCE_UPDATE_FAILED_TITLE, "Resource update failed!"),
            _template(
                MessageKey.UNAUTHORIZED,
                "Unfortunately, you're not authorized to access '{0}'.",
            ),
            _template(MessageKey.UNAUTHORIZED_TITLE, "Access denied!"),
            _template(
                MessageKey.UNEXPECTED_ERROR,
                "Unfortunately, an unexpected error has occurred!",
            ),
            _template(MessageKey.UNEXPECTED_ERROR_TITLE, "An error has occurred!"),
            _template(
                MessageKey.VALIDATION_ERROR,
                "Unfortunately, '{0}' validation errors have occurred.",
            ),
            _template(MessageKey.VALIDATION_ERROR_TITLE, "Request validation failed!"),
            _template(
                MessageKey.TASK_CANCELLED,
                "Unfortunately, the '{0}' task has been cancelled.",
            ),
            _template(MessageKey.TASK_CANCELLED_TITLE, "Task cancelled!"),
        )
    )
)


def template_for(key: MessageKey) -> MessageTemplate:
    """Return the template registered for ``key``."""
    return MESSAGE_TEMPLATES[key]

