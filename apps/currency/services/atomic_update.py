"""
Atomic balance updates.

``update_balance`` is the only code path that writes ledger rows or the
cached ``Student.currency_balance``. Both writes happen in one database
transaction while the student row is locked, so they either land together
or not at all, and concurrent updates for the same student run one after
another. Updates for different students never wait on each other.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction, OperationalError, InterfaceError
from django.utils import timezone

from apps.classrooms.models import Student
from apps.currency.exceptions import (
    InsufficientFundsError,
    InvalidTransactionError,
    LockTimeoutError,
    StorageUnavailableError,
    StudentNotFoundError,
)
from apps.currency.metadata import DeductMetadata, GrantMetadata
from apps.currency.models import CurrencyTransaction, TransactionType

from . import ledger

logger = logging.getLogger(__name__)

LOCK_ERROR_MARKERS = (
    'database is locked',
    'lock timeout',
    'lock_timeout',
    'could not obtain lock',
    'deadlock detected',
    'could not serialize',
    'canceling statement due to statement timeout',
)


@dataclass(frozen=True)
class BalanceUpdate:
    new_balance: int
    transaction_id: UUID
    transaction: CurrencyTransaction


def classify_database_error(exc):
    """Map a driver error onto LockTimeoutError or StorageUnavailableError."""
    message = str(exc).lower()
    if any(marker in message for marker in LOCK_ERROR_MARKERS):
        return LockTimeoutError(f"Balance lock not acquired: {exc}")
    return StorageUnavailableError(f"Ledger storage unavailable: {exc}")


def update_balance(
    *,
    student_id: UUID,
    amount: int,
    transaction_type,
    description: str = '',
    actor_id: Optional[UUID] = None,
    metadata=None,
) -> BalanceUpdate:
    """
    Apply a signed amount to a student's balance and record it in the ledger.

    Steps, in one transaction:
        1. Lock the student row (SELECT ... FOR UPDATE)
        2. Read the cached balance under the lock
        3. Reject debits that would go below zero
        4. Append the ledger row
        5. Write the new cached balance
        6. Commit

    When called inside an outer ``transaction.atomic`` block (purchases,
    reward grants) the caller's transaction is the commit boundary and any
    later failure there undoes this update too.

    Args:
        student_id: UUID of the student
        amount: Signed amount; negative for spend/deduct
        transaction_type: One of TransactionType
        description: Reason shown in history
        actor_id: UUID of the acting user, None for system rows
        metadata: Metadata variant matching the type

    Returns:
        BalanceUpdate with the new balance and the ledger row

    Raises:
        StudentNotFoundError: If student doesn't exist
        InsufficientFundsError: If a debit would make the balance negative
        InvalidTransactionError: If the amount or type is invalid
        LockTimeoutError: If the lock or statement timeout expired
        StorageUnavailableError: If the database failed
    """
    transaction_type = ledger.coerce_type(transaction_type)
    ledger.validate_amount(amount, transaction_type)

    limit = settings.CURRENCY_MAX_TRANSACTION_AMOUNT
    if abs(amount) > limit:
        raise InvalidTransactionError(
            f"Amount {amount} exceeds the per-transaction limit of {limit} coins"
        )

    try:
        with transaction.atomic():
            try:
                student = (
                    Student.objects
                    .select_for_update()
                    .only('id', 'currency_balance')
                    .get(id=student_id)
                )
            except Student.DoesNotExist:
                raise StudentNotFoundError(f"Student with ID {student_id} not found")

            current_balance = student.currency_balance
            new_balance = current_balance + amount

            if transaction_type.is_debit and new_balance < 0:
                logger.info(
                    "Insufficient funds for student %s: balance=%s amount=%s type=%s",
                    student_id, current_balance, amount, transaction_type,
                )
                raise InsufficientFundsError(student_id, current_balance, amount)

            entry = ledger.append(
                student_id=student.id,
                amount=amount,
                transaction_type=transaction_type,
                description=description,
                actor_id=actor_id,
                metadata=metadata,
            )

            Student.objects.filter(id=student.id).update(
                currency_balance=new_balance,
                updated_at=timezone.now(),
            )
    except (OperationalError, InterfaceError) as exc:
        error = classify_database_error(exc)
        logger.warning(
            "Balance update for student %s aborted (%s): %s",
            student_id, type(error).__name__, exc,
        )
        raise error from exc

    if abs(amount) > settings.CURRENCY_LARGE_CHANGE_WARNING:
        logger.warning(
            "Large balance change for student %s: %s -> %s",
            student_id, current_balance, new_balance,
        )

    logger.info(
        "Ledger %s %+d for student %s (balance %s -> %s, transaction %s)",
        transaction_type, amount, student_id, current_balance, new_balance, entry.id,
    )

    return BalanceUpdate(
        new_balance=new_balance,
        transaction_id=entry.id,
        transaction=entry,
    )


def grant_coins(*, student_id: UUID, amount: int, actor=None, reason: str = '') -> BalanceUpdate:
    """
    Teacher gives coins to a student.

    Raises:
        InvalidTransactionError: If amount is outside 1..CURRENCY_MAX_GRANT
        StudentNotFoundError: If student doesn't exist
    """
    max_grant = settings.CURRENCY_MAX_GRANT
    if isinstance(amount, bool) or not isinstance(amount, int) or not 1 <= amount <= max_grant:
        raise InvalidTransactionError(f"Invalid amount (1-{max_grant} coins)")

    return update_balance(
        student_id=student_id,
        amount=amount,
        transaction_type=TransactionType.GRANT,
        description=reason or 'Teacher bonus',
        actor_id=actor.id if actor else None,
        metadata=GrantMetadata(reason=reason),
    )


def deduct_coins(*, student_id: UUID, amount: int, actor=None, reason: str = '') -> BalanceUpdate:
    """
    Teacher takes coins from a student. Never overdraws.

    Raises:
        InvalidTransactionError: If amount is not a positive integer
        InsufficientFundsError: If the student has fewer coins than amount
        StudentNotFoundError: If student doesn't exist
    """
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidTransactionError("Invalid amount")

    return update_balance(
        student_id=student_id,
        amount=-amount,
        transaction_type=TransactionType.DEDUCT,
        description=reason or 'Teacher adjustment',
        actor_id=actor.id if actor else None,
        metadata=DeductMetadata(reason=reason),
    )
