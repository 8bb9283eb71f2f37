from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.generics import get_object_or_404
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.classrooms.models import Student
from apps.classrooms.permissions import IsStaffUser, can_manage_student
from apps.currency.exceptions import CurrencyServiceError
from apps.currency.responses import ledger_error_response
from apps.currency.serializers import ErrorResponseSerializer
from apps.currency.views import LedgerPagination
from .exceptions import (
    InvalidRewardError,
    RewardAmountMismatchError,
    RewardConflictError,
    RewardSourceNotFoundError,
    RewardsServiceError,
)
from .models import RewardSource, RewardStatus
from .serializers import (
    RecoveryStatusSerializer,
    RewardGrantSerializer,
    RewardIntakeSerializer,
    RewardSourceSerializer,
)
from .services import RecoveryTaskManager, grant_reward, submit_reward

REWARD_STATUS_MAP = [
    (RewardSourceNotFoundError, status.HTTP_404_NOT_FOUND, 'reward_not_found'),
    (InvalidRewardError, status.HTTP_400_BAD_REQUEST, 'invalid_reward'),
    (RewardConflictError, status.HTTP_409_CONFLICT, 'reward_conflict'),
    (RewardAmountMismatchError, status.HTTP_400_BAD_REQUEST, 'reward_amount_mismatch'),
]


def _get_source_for(user, source_id):
    source = get_object_or_404(
        RewardSource.objects.select_related('student__classroom'),
        id=source_id,
    )
    if not can_manage_student(user, source.student):
        raise PermissionDenied('You can only view rewards for your own students.')
    return source


@extend_schema(
    request=RewardIntakeSerializer,
    responses={
        201: RewardSourceSerializer,
        200: RewardSourceSerializer,
        400: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
        409: ErrorResponseSerializer,
        503: ErrorResponseSerializer,
    },
    description=(
        "Record a quiz reward and try to grant it. Redelivering the same id "
        "returns the stored reward with 200 and never pays twice."
    ),
    tags=['rewards'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def submit(request):
    """
    POST /api/rewards/
    Body: {"student": "<uuid>", "coins_earned": 15, "id": "<uuid>"}
    """
    serializer = RewardIntakeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    student = Student.objects.select_related('classroom').filter(id=data['student']).first()
    if student is not None and not can_manage_student(request.user, student):
        raise PermissionDenied('You can only reward students in your own classrooms.')

    try:
        source, created = submit_reward(
            student_id=data['student'],
            coins_earned=data['coins_earned'],
            source_id=data.get('id'),
        )
    except (CurrencyServiceError, RewardsServiceError) as e:
        return ledger_error_response(e, REWARD_STATUS_MAP)

    return Response(
        RewardSourceSerializer(source).data,
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
    )


@extend_schema(
    responses={200: RewardSourceSerializer, 404: ErrorResponseSerializer},
    description="Processing state of a reward.",
    tags=['rewards'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def reward_detail(request, source_id):
    """
    GET /api/rewards/{source_id}/
    """
    source = _get_source_for(request.user, source_id)
    return Response(RewardSourceSerializer(source).data)


@extend_schema(
    responses={200: RewardSourceSerializer(many=True)},
    description="Rewards that exhausted their retries and need manual review.",
    tags=['rewards'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffUser])
def failed_rewards(request):
    """
    GET /api/rewards/failed/
    """
    queryset = (
        RewardSource.objects
        .filter(status=RewardStatus.FAILED)
        .select_related('student')
        .order_by('-updated_at')
    )

    paginator = LedgerPagination()
    page = paginator.paginate_queryset(queryset, request)
    serializer = RewardSourceSerializer(page, many=True)
    return paginator.get_paginated_response(serializer.data)


@extend_schema(
    request=None,
    responses={
        200: RewardGrantSerializer,
        400: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
        503: ErrorResponseSerializer,
    },
    description="Grant a reward by hand after review. Safe to repeat.",
    tags=['rewards'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffUser])
def retry_reward(request, source_id):
    """
    POST /api/rewards/{source_id}/retry/
    """
    try:
        result = grant_reward(source_id)
    except (CurrencyServiceError, RewardsServiceError) as e:
        return ledger_error_response(e, REWARD_STATUS_MAP)

    return Response(RewardGrantSerializer(result).data)


@extend_schema(
    responses={200: RecoveryStatusSerializer},
    description="Number of rewards in each processing state.",
    tags=['rewards'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffUser])
def recovery_status(request):
    """
    GET /api/rewards/status/
    """
    return Response(RecoveryStatusSerializer(RecoveryTaskManager().status()).data)
