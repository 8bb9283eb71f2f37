from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.classrooms.permissions import CanManageStudent
from apps.currency.exceptions import CurrencyServiceError
from apps.currency.responses import ledger_error_response
from apps.currency.serializers import ErrorResponseSerializer
from .models import StoreItem
from .serializers import (
    EquipInputSerializer,
    PurchaseInputSerializer,
    PurchaseResultSerializer,
    StoreItemSerializer,
    InventoryEntrySerializer,
)
from .services import (
    AlreadyOwnedError,
    ItemNotFoundError,
    NotOwnedError,
    StoreServiceError,
    purchase,
    student_inventory,
    set_equipped,
)


STORE_STATUS_MAP = [
    (ItemNotFoundError, status.HTTP_404_NOT_FOUND, 'item_not_found'),
    (AlreadyOwnedError, status.HTTP_400_BAD_REQUEST, 'already_owned'),
    (NotOwnedError, status.HTTP_404_NOT_FOUND, 'not_owned'),
]


@extend_schema(
    responses={200: StoreItemSerializer(many=True)},
    description="Items currently for sale.",
    tags=['store'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def catalog(request):
    """
    GET /api/store/items/
    """
    items = StoreItem.objects.filter(is_active=True)
    return Response(StoreItemSerializer(items, many=True).data)


@extend_schema(
    request=PurchaseInputSerializer,
    responses={
        201: PurchaseResultSerializer,
        400: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
        503: ErrorResponseSerializer,
    },
    description=(
        "Buy an item for a student. Coins are deducted and the item is added "
        "to the inventory together, or nothing happens."
    ),
    tags=['store'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, CanManageStudent])
def purchase_item(request, student_id):
    """
    POST /api/store/students/{student_id}/purchase/
    Body: {"item": "<uuid>"}
    """
    serializer = PurchaseInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        result = purchase(
            student_id=student_id,
            item_id=serializer.validated_data['item'],
            actor_id=request.user.id,
        )
    except (StoreServiceError, CurrencyServiceError) as e:
        return ledger_error_response(e, STORE_STATUS_MAP)

    return Response(
        PurchaseResultSerializer(result).data,
        status=status.HTTP_201_CREATED
    )


@extend_schema(
    responses={200: InventoryEntrySerializer(many=True), 404: ErrorResponseSerializer},
    description="Items a student owns.",
    tags=['store'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, CanManageStudent])
def inventory(request, student_id):
    """
    GET /api/store/students/{student_id}/inventory/
    """
    try:
        entries = student_inventory(student_id=student_id)
    except CurrencyServiceError as e:
        return ledger_error_response(e)

    return Response(InventoryEntrySerializer(entries, many=True).data)


@extend_schema(
    request=EquipInputSerializer,
    responses={200: InventoryEntrySerializer, 404: ErrorResponseSerializer},
    description="Equip or unequip an item the student owns.",
    tags=['store'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, CanManageStudent])
def equip_item(request, student_id, item_id):
    """
    POST /api/store/students/{student_id}/inventory/{item_id}/equip/
    Body: {"equipped": true}
    """
    serializer = EquipInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        entry = set_equipped(
            student_id=student_id,
            item_id=item_id,
            equipped=serializer.validated_data['equipped'],
        )
    except (StoreServiceError, CurrencyServiceError) as e:
        return ledger_error_response(e, STORE_STATUS_MAP)

    return Response(InventoryEntrySerializer(entry).data)
