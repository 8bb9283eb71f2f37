"""
Store purchase flow.

A purchase is one database transaction: debit the student through
``update_balance`` and record ownership. If the ownership insert fails the
debit is rolled back with it, so a failed purchase never costs coins.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import QuerySet

from apps.classrooms.models import Student
from apps.currency.exceptions import StudentNotFoundError
from apps.currency.metadata import SpendMetadata
from apps.currency.models import TransactionType
from apps.currency.services import update_balance
from apps.store.exceptions import AlreadyOwnedError, ItemNotFoundError, NotOwnedError
from apps.store.models import InventoryEntry, StoreItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PurchaseResult:
    success: bool
    transaction_id: UUID
    inventory_entry_id: UUID
    new_balance: int
    item: StoreItem


def purchase(*, student_id: UUID, item_id: UUID, actor_id: Optional[UUID] = None) -> PurchaseResult:
    """
    Buy a store item for a student.

    The item's current cost is charged and copied onto the ledger row, so
    later catalog price changes don't rewrite history.

    Args:
        student_id: UUID of the buying student
        item_id: UUID of the store item
        actor_id: UUID of the user acting for the student, if any

    Returns:
        PurchaseResult with the ledger row and inventory entry IDs

    Raises:
        ItemNotFoundError: If the item doesn't exist or is inactive
        AlreadyOwnedError: If the student already owns the item
        StudentNotFoundError: If student doesn't exist
        InsufficientFundsError: If the student can't afford the item
        LockTimeoutError, StorageUnavailableError: Transient failures
    """
    with transaction.atomic():
        try:
            item = StoreItem.objects.get(id=item_id, is_active=True)
        except StoreItem.DoesNotExist:
            raise ItemNotFoundError(f"Item with ID {item_id} not found or not available")

        balance_update = update_balance(
            student_id=student_id,
            amount=-item.cost,
            transaction_type=TransactionType.SPEND,
            description=f"Purchase: {item.name} ({item.cost} coins)",
            actor_id=actor_id,
            metadata=SpendMetadata(
                item_id=item.id,
                item_name=item.name,
                unit_cost=item.cost,
            ),
        )

        # Checked after the debit took the student lock, so two racing
        # purchases of the same item see each other here
        if InventoryEntry.objects.filter(student_id=student_id, item=item).exists():
            raise AlreadyOwnedError(f"Student already owns {item.name}")

        try:
            with transaction.atomic():
                entry = InventoryEntry.objects.create(student_id=student_id, item=item)
        except IntegrityError:
            logger.info("Purchase of %s by student %s rolled back: already owned", item_id, student_id)
            raise AlreadyOwnedError(f"Student already owns {item.name}")

    logger.info(
        "Student %s bought %s for %s coins (balance now %s)",
        student_id, item.name, item.cost, balance_update.new_balance,
    )

    return PurchaseResult(
        success=True,
        transaction_id=balance_update.transaction_id,
        inventory_entry_id=entry.id,
        new_balance=balance_update.new_balance,
        item=item,
    )


def student_inventory(*, student_id: UUID) -> QuerySet:
    """
    Items owned by a student, oldest acquisition first.

    Raises:
        StudentNotFoundError: If student doesn't exist
    """
    if not Student.objects.filter(id=student_id).exists():
        raise StudentNotFoundError(f"Student with ID {student_id} not found")

    return (
        InventoryEntry.objects
        .filter(student_id=student_id)
        .select_related('item')
        .order_by('acquired_at')
    )


def set_equipped(*, student_id: UUID, item_id: UUID, equipped: bool = True) -> InventoryEntry:
    """
    Equip or unequip an owned item. Does not touch the balance.

    Raises:
        StudentNotFoundError: If student doesn't exist
        NotOwnedError: If the student doesn't own the item
    """
    if not Student.objects.filter(id=student_id).exists():
        raise StudentNotFoundError(f"Student with ID {student_id} not found")

    try:
        entry = (
            InventoryEntry.objects
            .select_related('item')
            .get(student_id=student_id, item_id=item_id)
        )
    except InventoryEntry.DoesNotExist:
        raise NotOwnedError(f"Student doesn't own item {item_id}")

    if entry.is_equipped != equipped:
        entry.is_equipped = equipped
        entry.save(update_fields=['is_equipped'])
        logger.info(
            "Student %s %s %s", student_id,
            'equipped' if equipped else 'unequipped', entry.item.name,
        )

    return entry
