"""
Translation of service exceptions into API responses.

Shared by the currency, store and rewards views so the same failure gets
the same status code everywhere.
"""
from rest_framework import status
from rest_framework.response import Response

from apps.currency.exceptions import (
    ClassroomNotFoundError,
    InsufficientFundsError,
    InvalidTransactionError,
    StudentNotFoundError,
    TransientLedgerError,
)


def ledger_error_response(exc, extra_status_map=None):
    """Build an error Response for a service exception."""
    status_map = [
        (InsufficientFundsError, status.HTTP_400_BAD_REQUEST, 'insufficient_funds'),
        (InvalidTransactionError, status.HTTP_400_BAD_REQUEST, 'invalid_transaction'),
        (StudentNotFoundError, status.HTTP_404_NOT_FOUND, 'student_not_found'),
        (ClassroomNotFoundError, status.HTTP_404_NOT_FOUND, 'classroom_not_found'),
        (TransientLedgerError, status.HTTP_503_SERVICE_UNAVAILABLE, 'temporarily_unavailable'),
    ]
    if extra_status_map:
        status_map = list(extra_status_map) + status_map

    for exc_class, http_status, code in status_map:
        if isinstance(exc, exc_class):
            return Response({'error': str(exc), 'code': code}, status=http_status)

    raise exc
