import logging

from django.db import DatabaseError
from rest_framework import exceptions, status
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class BadRequest(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Bad request.'
    default_code = 'bad_request'


class Conflict(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource is in a conflicting state.'
    default_code = 'conflict'


class InternalError(exceptions.APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error'
    default_code = 'internal_error'


class InvalidPlanConfiguration(InternalError):
    default_detail = 'Invalid plan duration'
    default_code = 'invalid_plan_configuration'


def flatten_errors(detail):
    """Reduce DRF validation detail to one message per field."""
    errors = {}
    if isinstance(detail, dict):
        for field, error_list in detail.items():
            if isinstance(error_list, list):
                errors[field] = str(error_list[0]) if error_list else 'Invalid value'
            else:
                errors[field] = str(error_list)
    elif isinstance(detail, list):
        errors['non_field_errors'] = str(detail[0]) if detail else 'Invalid value'
    else:
        errors['non_field_errors'] = str(detail)
    return errors


def envelope_exception_handler(exc, context):
    if isinstance(exc, DatabaseError):
        logger.exception('Database error in %s', context.get('view').__class__.__name__)
        exc = InternalError()

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        response.data = {
            'status': response.status_code,
            'message': 'Validation failed',
            'errors': flatten_errors(exc.detail),
        }
        return response

    detail = getattr(exc, 'detail', None)
    if isinstance(detail, dict):
        message = str(next(iter(detail.values()), exc.default_detail))
    elif isinstance(detail, list):
        message = str(detail[0]) if detail else str(exc.default_detail)
    else:
        message = str(detail) if detail is not None else str(exc)

    response.data = {'status': response.status_code, 'message': message}
    return response

