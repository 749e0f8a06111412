"""DRF exception handler producing the standard error body.

Every error response looks like::

    {"type": "client_error", "errors": [{"code": "not_found", "detail": "...", "attr": null}]}

Domain errors are translated here so views never need ``try/except``
blocks for business-rule violations.
"""

from __future__ import annotations

from typing import Any

import structlog
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from modules.core.authorization import OperationNotPermitted
from modules.core.exceptions import (
    ConflictingState,
    DomainError,
    IllegalStateTransition,
    InvalidInput,
    NotFound,
)

logger = structlog.get_logger(__name__)

DOMAIN_ERROR_STATUS: dict[type[DomainError], tuple[int, str]] = {
    NotFound: (status.HTTP_404_NOT_FOUND, "not_found"),
    InvalidInput: (status.HTTP_400_BAD_REQUEST, "invalid_input"),
    IllegalStateTransition: (status.HTTP_409_CONFLICT, "illegal_state_transition"),
    ConflictingState: (status.HTTP_409_CONFLICT, "conflicting_state"),
}


def _error_type(status_code: int) -> str:
    return "server_error" if status_code >= 500 else "client_error"


def _flatten_validation(detail: Any, attr: str | None = None) -> list[dict[str, Any]]:
    if isinstance(detail, dict):
        errors: list[dict[str, Any]] = []
        for key, value in detail.items():
            nested = key if attr is None else f"{attr}.{key}"
            errors.extend(_flatten_validation(value, nested))
        return errors
    if isinstance(detail, list):
        errors = []
        for index, value in enumerate(detail):
            if isinstance(value, (dict, list)):
                nested = str(index) if attr is None else f"{attr}.{index}"
                errors.extend(_flatten_validation(value, nested))
            else:
                errors.extend(_flatten_validation(value, attr))
        return errors
    return [
        {
            "code": getattr(detail, "code", "invalid"),
            "detail": str(detail),
            "attr": attr,
        }
    ]


def domain_error_response(exc: DomainError) -> Response:
    for kind, (status_code, code) in DOMAIN_ERROR_STATUS.items():
        if isinstance(exc, kind):
            break
    else:
        status_code, code = status.HTTP_400_BAD_REQUEST, "domain_error"

    logger.info(
        "domain_error",
        error=exc.__class__.__name__,
        detail=exc.message,
        status_code=status_code,
    )
    return Response(
        {
            "type": _error_type(status_code),
            "errors": [{"code": code, "detail": exc.message, "attr": None}],
        },
        status=status_code,
    )


def standard_exception_handler(exc: Exception, context: dict) -> Response | None:
    """Entry point referenced by ``REST_FRAMEWORK['EXCEPTION_HANDLER']``."""
    if isinstance(exc, DomainError):
        return domain_error_response(exc)

    if isinstance(exc, OperationNotPermitted):
        return Response(
            {
                "type": "client_error",
                "errors": [
                    {"code": "permission_denied", "detail": str(exc), "attr": None}
                ],
            },
            status=status.HTTP_403_FORBIDDEN,
        )

    response = drf_exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ValidationError):
        body = {
            "type": "validation_error",
            "errors": _flatten_validation(exc.detail),
        }
    elif isinstance(exc, APIException):
        body = {
            "type": _error_type(response.status_code),
            "errors": [
                {
                    "code": exc.get_codes() if isinstance(exc.get_codes(), str) else exc.default_code,
                    "detail": str(exc.detail),
                    "attr": None,
                }
            ],
        }
    else:
        return response

    response.data = body
    return response
