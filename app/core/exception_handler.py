"""
DRF exception handler producing the API error envelope.

Maps errors to responses:
    BaseApplicationError -> its status_code (400/403/404), to_dict() body
    DRF APIException     -> DRF's status (401 for NotAuthenticated)
    anything else        -> 500, message only (traceback only in DEBUG)

Envelope:
    {"success": false, "message": "...", "error_code": "...", "details": {...}}

Configured via REST_FRAMEWORK["EXCEPTION_HANDLER"].
"""

from __future__ import annotations

import logging
import traceback

from django.conf import settings
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import BaseApplicationError

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    if isinstance(exc, BaseApplicationError):
        logger.info(
            f"Request failed: {exc}",
            extra={"error_code": exc.error_code, "status_code": exc.status_code},
        )
        return Response(exc.to_dict(), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        detail = response.data
        message = detail.get("detail") if isinstance(detail, dict) else None
        body = {
            "success": False,
            "message": str(message) if message else "Invalid request",
            "error_code": getattr(exc, "default_code", "error").upper(),
        }
        if message is None:
            body["details"] = detail
        response.data = body
        return response

    view = context.get("view")
    logger.error(
        f"Unhandled error in {view.__class__.__name__ if view else 'view'}: {exc}",
        exc_info=True,
    )
    body = {
        "success": False,
        "message": "Internal server error",
        "error_code": "INTERNAL_ERROR",
    }
    if settings.DEBUG:
        body["details"] = {"traceback": traceback.format_exc()}
    return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
