from rest_framework import status
from rest_framework.response import Response

from .exceptions import flatten_errors


def api_response(message, data=None, status_code=status.HTTP_200_OK):
    return Response({
        'status': status_code,
        'message': message,
        'data': data,
    }, status=status_code)


def validation_failed(serializer):
    return Response({
        'status': status.HTTP_400_BAD_REQUEST,
        'message': 'Validation failed',
        'errors': flatten_errors(serializer.errors),
    }, status=status.HTTP_400_BAD_REQUEST)


def to_float(value):
    return float(value or 0)
