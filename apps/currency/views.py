from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.classrooms.permissions import CanManageClassroom, CanManageStudent
from .exceptions import CurrencyServiceError
from .responses import ledger_error_response
from .serializers import (
    CoinAdjustmentInputSerializer,
    BalanceUpdateSerializer,
    BalanceSnapshotSerializer,
    CurrencyTransactionSerializer,
    ErrorResponseSerializer,
)
from .services import (
    balance_snapshot,
    classroom_history,
    deduct_coins,
    grant_coins,
    history,
)


class LedgerPagination(PageNumberPagination):
    """Pagination for ledger history."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


def _adjust(request, student_id, service):
    serializer = CoinAdjustmentInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        result = service(
            student_id=student_id,
            amount=serializer.validated_data['amount'],
            actor=request.user,
            reason=serializer.validated_data['reason'],
        )
    except CurrencyServiceError as e:
        return ledger_error_response(e)

    return Response(
        BalanceUpdateSerializer(result).data,
        status=status.HTTP_201_CREATED
    )


@extend_schema(
    request=CoinAdjustmentInputSerializer,
    responses={
        201: BalanceUpdateSerializer,
        400: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
        503: ErrorResponseSerializer,
    },
    description="Give coins to a student (teacher grant).",
    tags=['currency'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, CanManageStudent])
def grant(request, student_id):
    """
    Give coins to a student.

    POST /api/currency/students/{student_id}/grant/
    Body: {"amount": 25, "reason": "Helped a classmate"}
    """
    return _adjust(request, student_id, grant_coins)


@extend_schema(
    request=CoinAdjustmentInputSerializer,
    responses={
        201: BalanceUpdateSerializer,
        400: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
        503: ErrorResponseSerializer,
    },
    description="Take coins from a student. Fails with 400 if the student has too few coins.",
    tags=['currency'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, CanManageStudent])
def deduct(request, student_id):
    """
    Take coins from a student.

    POST /api/currency/students/{student_id}/deduct/
    Body: {"amount": 10, "reason": "Late homework"}
    """
    return _adjust(request, student_id, deduct_coins)


@extend_schema(
    responses={200: BalanceSnapshotSerializer, 404: ErrorResponseSerializer},
    description="Cached balance next to the ledger sum for a student.",
    tags=['currency'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, CanManageStudent])
def balance(request, student_id):
    """
    GET /api/currency/students/{student_id}/balance/
    """
    try:
        snapshot = balance_snapshot(student_id)
    except CurrencyServiceError as e:
        return ledger_error_response(e)

    return Response(BalanceSnapshotSerializer(snapshot).data)


@extend_schema(
    responses={200: CurrencyTransactionSerializer(many=True), 404: ErrorResponseSerializer},
    description="Ledger rows for a student, oldest first.",
    tags=['currency'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, CanManageStudent])
def transaction_history(request, student_id):
    """
    GET /api/currency/students/{student_id}/history/
    """
    try:
        queryset = history(student_id=student_id)
    except CurrencyServiceError as e:
        return ledger_error_response(e)

    paginator = LedgerPagination()
    page = paginator.paginate_queryset(queryset, request)
    serializer = CurrencyTransactionSerializer(page, many=True)
    return paginator.get_paginated_response(serializer.data)


@extend_schema(
    responses={200: CurrencyTransactionSerializer(many=True), 404: ErrorResponseSerializer},
    description="Ledger rows for every student in a classroom, oldest first.",
    tags=['currency'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, CanManageClassroom])
def classroom_transaction_history(request, classroom_id):
    """
    GET /api/currency/classrooms/{classroom_id}/history/
    """
    try:
        queryset = classroom_history(classroom_id=classroom_id)
    except CurrencyServiceError as e:
        return ledger_error_response(e)

    paginator = LedgerPagination()
    page = paginator.paginate_queryset(queryset, request)
    serializer = CurrencyTransactionSerializer(page, many=True)
    return paginator.get_paginated_response(serializer.data)
