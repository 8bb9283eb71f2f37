"""
Ledger store.

Append-only access to ``CurrencyTransaction`` rows. ``append`` does not look
at balances; sufficiency is checked by ``update_balance`` under the student
lock before it calls in here, and nothing else should.
"""

from typing import Optional
from uuid import UUID

from django.db.models import QuerySet

from apps.classrooms.models import Classroom, Student
from apps.currency.exceptions import (
    ClassroomNotFoundError,
    InvalidTransactionError,
    StudentNotFoundError,
)
from apps.currency.metadata import SpendMetadata, metadata_to_dict, parse_metadata
from apps.currency.models import CurrencyTransaction, TransactionType


def validate_amount(amount: int, transaction_type: TransactionType) -> None:
    """Reject zero amounts and amounts whose sign disagrees with the type."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidTransactionError(f"Amount must be an integer, got {amount!r}")
    if amount == 0:
        raise InvalidTransactionError("Amount must not be zero")
    if transaction_type.is_debit and amount > 0:
        raise InvalidTransactionError(f"{transaction_type} amounts must be negative")
    if not transaction_type.is_debit and amount < 0:
        raise InvalidTransactionError(f"{transaction_type} amounts must be positive")


def coerce_type(transaction_type) -> TransactionType:
    try:
        return TransactionType(transaction_type)
    except ValueError:
        raise InvalidTransactionError(f"Unknown transaction type: {transaction_type!r}")


def append(
    *,
    student_id: UUID,
    amount: int,
    transaction_type,
    description: str = '',
    actor_id: Optional[UUID] = None,
    metadata=None,
) -> CurrencyTransaction:
    """
    Insert one ledger row and return it.

    Args:
        student_id: Student the row belongs to
        amount: Signed coin amount (credits positive, debits negative)
        transaction_type: One of TransactionType
        description: Human readable reason shown in history
        actor_id: User who made the change, None for system rows
        metadata: Variant matching ``transaction_type`` (or its dict form)

    Raises:
        InvalidTransactionError: If type, amount or metadata are invalid
    """
    transaction_type = coerce_type(transaction_type)
    validate_amount(amount, transaction_type)

    stored_metadata = {}
    if metadata is not None:
        variant = parse_metadata(transaction_type, metadata)
        if isinstance(variant, SpendMetadata) and variant.unit_cost != -amount:
            raise InvalidTransactionError(
                f"Spend of {amount} does not match unit cost {variant.unit_cost}"
            )
        stored_metadata = metadata_to_dict(variant)

    return CurrencyTransaction.objects.create(
        student_id=student_id,
        actor_id=actor_id,
        amount=amount,
        transaction_type=transaction_type,
        description=description,
        metadata=stored_metadata,
    )


def history(*, student_id: UUID) -> QuerySet:
    """
    Return a student's ledger rows, oldest first.

    Raises:
        StudentNotFoundError: If the student doesn't exist
    """
    if not Student.objects.filter(id=student_id).exists():
        raise StudentNotFoundError(f"Student with ID {student_id} not found")

    return (
        CurrencyTransaction.objects
        .filter(student_id=student_id)
        .select_related('actor')
        .order_by('created_at', 'id')
    )


def classroom_history(*, classroom_id: UUID) -> QuerySet:
    """
    Return the ledger rows of every student in a classroom, oldest first.

    Raises:
        ClassroomNotFoundError: If the classroom doesn't exist
    """
    if not Classroom.objects.filter(id=classroom_id).exists():
        raise ClassroomNotFoundError(f"Classroom with ID {classroom_id} not found")

    return (
        CurrencyTransaction.objects
        .filter(student__classroom_id=classroom_id)
        .select_related('actor', 'student')
        .order_by('created_at', 'id')
    )
