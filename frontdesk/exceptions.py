"""
Error taxonomy and the DRF exception handler.

Services raise :class:`ClinicError` with a machine-readable ``kind``;
the handler below turns it (and DRF's own exceptions) into the
``{success: false, error, code, details?}`` envelope the front-end
expects.  Anything else is logged with its traceback and reported as a
500.
"""
from __future__ import annotations

import logging

from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

VALIDATION = 'validation'
NOT_FOUND = 'not_found'
CONFLICT = 'conflict'
UNAUTHORIZED = 'unauthorized'
FORBIDDEN = 'forbidden'
SHIFT_STATE = 'shift_state'

KIND_STATUS = {
    VALIDATION: status.HTTP_400_BAD_REQUEST,
    NOT_FOUND: status.HTTP_404_NOT_FOUND,
    CONFLICT: status.HTTP_409_CONFLICT,
    UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    FORBIDDEN: status.HTTP_403_FORBIDDEN,
    SHIFT_STATE: status.HTTP_409_CONFLICT,
}


class ClinicError(Exception):
    """A domain failure tagged with the kind of problem it represents."""

    def __init__(self, kind: str, message: str, details=None):
        if kind not in KIND_STATUS:
            raise ValueError(f"unknown error kind: {kind}")
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details

    @property
    def status_code(self) -> int:
        return KIND_STATUS[self.kind]

    def __repr__(self) -> str:
        return f"ClinicError({self.kind!r}, {self.message!r})"


def _error_body(message, code: str, details=None) -> dict:
    body = {'success': False, 'error': message, 'code': code}
    if details:
        body['details'] = details
    return body


def _drf_kind(exc: exceptions.APIException) -> str:
    if isinstance(exc, exceptions.ValidationError):
        return VALIDATION
    if isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        return UNAUTHORIZED
    if isinstance(exc, exceptions.PermissionDenied):
        return FORBIDDEN
    if isinstance(exc, exceptions.NotFound):
        return NOT_FOUND
    return exc.default_code or 'api_error'


def api_exception_handler(exc, context):
    if isinstance(exc, ClinicError):
        return Response(
            _error_body(exc.message, exc.kind, exc.details),
            status=exc.status_code,
        )

    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view') if context else None
        logger.exception(f"Unhandled error in {view.__class__.__name__ if view else 'api'}: {exc}")
        return Response(
            {'success': False, 'error': 'Internal server error', 'message': str(exc)},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, Http404):
        return Response(_error_body('Not found', NOT_FOUND), status=resp.status_code, headers=_auth_headers(resp))

    kind = _drf_kind(exc)
    if kind == VALIDATION:
        return Response(
            _error_body('Validation failed', VALIDATION, resp.data),
            status=resp.status_code,
        )

    detail = resp.data.get('detail') if isinstance(resp.data, dict) else resp.data
    return Response(
        _error_body(str(detail or exc), kind),
        status=resp.status_code,
        headers=_auth_headers(resp),
    )


def _auth_headers(resp) -> dict:
    headers = {}
    for name in ('WWW-Authenticate', 'Retry-After'):
        if resp.has_header(name):
            headers[name] = resp[name]
    return headers
