import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class DatabaseUnavailable(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Database is unavailable.'
    default_code = 'database_unavailable'


class InvalidTransition(APIException):
    """Requested action is not allowed from the record's current status."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid status transition.'
    default_code = 'invalid_transition'


class BadRequest(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Bad request.'
    default_code = 'bad_request'


class Conflict(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Record already exists.'
    default_code = 'conflict'


def _error(code, message, status_code, fields=None):
    error = {'code': code, 'message': message}
    if fields:
        error['fields'] = fields
    return Response({'ok': False, 'error': error}, status=status_code)


def _first_message(data):
    if isinstance(data, dict):
        for value in data.values():
            return _first_message(value)
        return ''
    if isinstance(data, (list, tuple)):
        return _first_message(data[0]) if data else ''
    return str(data)


def api_exception_handler(exc, context):
    if isinstance(exc, DatabaseError):
        logger.error('database error in %s: %s', context.get('view'), exc)
        return _error(DatabaseUnavailable.default_code, str(DatabaseUnavailable.default_detail), 503)
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('unhandled error in %s', context.get('view'), exc_info=exc)
        return _error('server_error', str(exc), 500)
    code = exc.default_code if isinstance(exc, APIException) else 'api_error'
    # field errors: surface the first one as the message
    if isinstance(exc, ValidationError) and not (isinstance(resp.data, dict) and 'detail' in resp.data):
        return _error(code, _first_message(resp.data), resp.status_code, fields=resp.data)
    detail = resp.data.get('detail') if isinstance(resp.data, dict) else resp.data
    return _error(code, str(detail) if detail is not None else str(exc), resp.status_code)
