"""
Global exception handler for consistent API error responses.
Follows DRF convention and returns uniform structure.
"""
import logging
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
from django.core.exceptions import PermissionDenied, ValidationError as DjangoValidationError
from django.conf import settings

from core.exceptions import LedgerError, PropagationError

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Custom exception handler that returns:
    { "detail": str, "code": str, "errors": dict (optional) }
    """
    response = exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, PropagationError):
            logger.error(
                'Propagation failed: structure_id=%s failed_ledger_ids=%s',
                exc.structure_id, exc.failed_ledger_ids,
            )
            response.data = {
                'detail': _get_detail(exc),
                'code': _get_code(exc),
                'errors': {
                    'structureId': exc.structure_id,
                    'failedLedgerIds': exc.failed_ledger_ids,
                },
            }
            return response
        if isinstance(response.data, dict):
            data = response.data
            if 'detail' not in data:
                # Serializer field errors: keep them under "errors"
                data = {'detail': _first_error(data), 'errors': data}
        else:
            data = {'detail': _get_detail(exc)}
        data['detail'] = str(data.get('detail') or _get_detail(exc))
        data.setdefault('code', _get_code(exc))
        response.data = data
        return response

    if isinstance(exc, PermissionDenied):
        return Response(
            {'detail': str(exc) or 'Permission denied', 'code': 'permission_denied'},
            status=status.HTTP_403_FORBIDDEN
        )
    if isinstance(exc, DjangoValidationError):
        return Response(
            {'detail': '; '.join(exc.messages), 'code': 'validation_error'},
            status=status.HTTP_400_BAD_REQUEST
        )

    logger.exception('Unhandled exception: %s', exc)
    error_detail = 'An internal error occurred.'
    if settings.DEBUG:
        error_detail = f'An internal error occurred: {str(exc)}'
    # Never expose stack traces to frontend; use standard API error format
    return Response(
        {'detail': error_detail, 'code': 'internal_error'},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def _first_error(errors):
    for field, messages in errors.items():
        if isinstance(messages, (list, tuple)) and messages:
            return f'{field}: {messages[0]}'
        return f'{field}: {messages}'
    return 'Invalid input.'


def _get_detail(exc):
    if hasattr(exc, 'detail'):
        d = exc.detail
        if isinstance(d, list):
            return d[0] if d else 'Error'
        if isinstance(d, dict):
            return d.get('detail', str(d))
        return str(d)
    return str(exc)


def _get_code(exc):
    if isinstance(exc, LedgerError):
        return exc.default_code
    codes = {
        'AuthenticationFailed': 'invalid_credentials',
        'NotAuthenticated': 'not_authenticated',
        'NotFound': 'not_found',
        'PermissionDenied': 'permission_denied',
        'ValidationError': 'validation_error',
        'MethodNotAllowed': 'method_not_allowed',
    }
    return codes.get(type(exc).__name__, 'error')
