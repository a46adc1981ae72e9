"""Standard error envelope for the HTTP boundary.

Every failure leaves the API as::

    {"type": "<Kind>", "errors": [{"code": "<code>", "detail": "<message>"}]}

Views translate domain errors with ``error_response``.  DRF's own
exceptions and anything that escapes a view go through
``api_exception_handler`` (``REST_FRAMEWORK["EXCEPTION_HANDLER"]``), which
turns an uncaught fault into an ``InternalError`` 500 instead of letting
it cross the boundary.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from shared.domain.exceptions import DomainError

logger = structlog.get_logger(__name__)


def error_body(kind: str, errors: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"type": kind, "errors": errors}


def error_response(exc: DomainError, status_code: int) -> Response:
    """Render a domain error in the standard envelope."""
    return Response(error_body(exc.kind, exc.as_errors()), status=status_code)


def _flatten_validation_detail(detail: Any, field: Optional[str] = None) -> List[Dict[str, Any]]:
    if isinstance(detail, dict):
        errors: List[Dict[str, Any]] = []
        for key, value in detail.items():
            name = key if field is None else f"{field}.{key}"
            errors.extend(_flatten_validation_detail(value, name))
        return errors
    if isinstance(detail, list):
        errors = []
        for index, value in enumerate(detail):
            name = field
            if isinstance(value, (dict, list)) and field is not None:
                name = f"{field}.{index}"
            errors.extend(_flatten_validation_detail(value, name))
        return errors
    error = {"code": getattr(detail, "code", "invalid"), "detail": str(detail)}
    if field is not None:
        error["field"] = field
    return [error]


def api_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """DRF exception handler producing the standard envelope."""
    response = exception_handler(exc, context)

    if response is None:
        if isinstance(exc, DomainError):
            return error_response(exc, status.HTTP_422_UNPROCESSABLE_ENTITY)
        view = context.get("view")
        logger.exception(
            "api.unhandled_exception",
            view=type(view).__name__ if view is not None else None,
            error=str(exc),
        )
        return Response(
            error_body(
                "InternalError",
                [{"code": "internal_error", "detail": "An unexpected error occurred."}],
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        kind = "InvalidCredential"
    elif isinstance(exc, exceptions.ValidationError):
        kind = "ValidationFailed"
        response.status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    else:
        kind = type(exc).__name__

    if isinstance(exc, exceptions.ValidationError):
        errors = _flatten_validation_detail(exc.detail)
    else:
        errors = [
            {
                "code": getattr(exc, "default_code", "error"),
                "detail": str(getattr(exc, "detail", exc)),
            }
        ]
    response.data = error_body(kind, errors)
    return response
