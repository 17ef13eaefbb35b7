# items/views/errors.py

"""
Service error -> HTTP response translation for the API boundary.

Views call the services inside try/except and hand any
InventoryServiceError / ValidationError to service_error_response().
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from rest_framework import status
from rest_framework.response import Response

from items.services.exceptions import InventoryServiceError


def service_error_response(exc: Exception) -> Response:
    if isinstance(exc, InventoryServiceError):
        body = {"detail": exc.detail, "code": exc.code}
        if exc.context:
            body["context"] = exc.context
        return Response(body, status=exc.http_status)

    if isinstance(exc, ValidationError):
        body = {"detail": "; ".join(exc.messages), "code": "VALIDATION_ERROR"}
        if hasattr(exc, "error_dict"):
            body["errors"] = exc.message_dict
        return Response(body, status=status.HTTP_400_BAD_REQUEST)

    raise exc


SERVICE_ERRORS = (InventoryServiceError, ValidationError)
