"""
Idempotent reward granting.

A reward source pays out at most once. ``grant_reward`` locks the source
row, then the student row (always in that order), writes the earn row and
marks the source completed in one transaction. Repeated calls for a
completed source return the first result instead of paying again.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.db import transaction, OperationalError, InterfaceError
from django.utils import timezone

from apps.classrooms.models import Student
from apps.currency.exceptions import (
    CurrencyServiceError,
    StudentNotFoundError,
    TransientLedgerError,
)
from apps.currency.metadata import EarnMetadata
from apps.currency.models import TransactionType
from apps.currency.services import classify_database_error, update_balance
from apps.rewards.exceptions import (
    InvalidRewardError,
    RewardAmountMismatchError,
    RewardConflictError,
    RewardSourceNotFoundError,
)
from apps.rewards.models import RewardSource, RewardStatus

from .attempts import claim_attempt, record_attempt_failure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RewardGrant:
    granted: bool
    transaction_id: Optional[UUID]
    duplicate: bool
    new_balance: Optional[int] = None


def grant_reward(reward_source_id: UUID, amount: Optional[int] = None) -> RewardGrant:
    """
    Credit a student for a reward source, exactly once.

    Args:
        reward_source_id: UUID of the RewardSource
        amount: Coins to grant; defaults to the source's coins_earned

    Returns:
        RewardGrant. ``duplicate`` is True when the source had already been
        processed, in which case nothing was written.

    Raises:
        RewardSourceNotFoundError: If the source doesn't exist
        RewardAmountMismatchError: If amount differs from coins_earned
        StudentNotFoundError: If the student is gone
        InvalidTransactionError: If the amount breaks ledger limits
        LockTimeoutError, StorageUnavailableError: Transient failures
    """
    try:
        with transaction.atomic():
            try:
                source = RewardSource.objects.select_for_update().get(id=reward_source_id)
            except RewardSource.DoesNotExist:
                raise RewardSourceNotFoundError(f"Reward source {reward_source_id} not found")

            if amount is None:
                amount = source.coins_earned
            elif amount != source.coins_earned:
                raise RewardAmountMismatchError(
                    f"Reward {source.id} is worth {source.coins_earned} coins, not {amount}"
                )

            if source.status == RewardStatus.COMPLETED:
                logger.info("Reward %s already processed, skipping", source.id)
                return RewardGrant(
                    granted=source.transaction_id is not None,
                    transaction_id=source.transaction_id,
                    duplicate=True,
                )

            balance_update = None
            if amount > 0:
                balance_update = update_balance(
                    student_id=source.student_id,
                    amount=amount,
                    transaction_type=TransactionType.EARN,
                    description=f"Quiz reward ({amount} coins)",
                    metadata=EarnMetadata(reward_source_id=str(source.id)),
                )

            source.status = RewardStatus.COMPLETED
            source.transaction = balance_update.transaction if balance_update else None
            source.completed_at = timezone.now()
            source.next_attempt_at = None
            source.last_error = ''
            source.save(update_fields=[
                'status', 'transaction', 'completed_at', 'next_attempt_at',
                'last_error', 'updated_at',
            ])
    except (OperationalError, InterfaceError) as exc:
        error = classify_database_error(exc)
        logger.warning("Reward %s grant aborted (%s): %s", reward_source_id, type(error).__name__, exc)
        raise error from exc

    if balance_update is None:
        logger.info("Reward %s completed with no coins", source.id)
        return RewardGrant(granted=False, transaction_id=None, duplicate=False)

    logger.info(
        "Reward %s granted %s coins to student %s",
        source.id, amount, source.student_id,
    )
    return RewardGrant(
        granted=True,
        transaction_id=balance_update.transaction_id,
        duplicate=False,
        new_balance=balance_update.new_balance,
    )


def record_reward_source(*, student_id: UUID, coins_earned: int,
                         source_id: Optional[UUID] = None):
    """
    Store a reward event delivered by the quiz collaborator.

    Delivering the same ``source_id`` again returns the stored source. Reusing
    it for a different student or amount is a conflict.

    Returns:
        Tuple (RewardSource, created)

    Raises:
        InvalidRewardError: If coins_earned is not a non-negative integer
        StudentNotFoundError: If student doesn't exist
        RewardConflictError: If source_id was recorded with other values
        LockTimeoutError, StorageUnavailableError: Transient failures
    """
    if isinstance(coins_earned, bool) or not isinstance(coins_earned, int) or coins_earned < 0:
        raise InvalidRewardError("coins_earned must be a non-negative integer")

    try:
        if not Student.objects.filter(id=student_id).exists():
            raise StudentNotFoundError(f"Student with ID {student_id} not found")

        if source_id is None:
            source = RewardSource.objects.create(student_id=student_id, coins_earned=coins_earned)
            created = True
        else:
            source, created = RewardSource.objects.get_or_create(
                id=source_id,
                defaults={'student_id': student_id, 'coins_earned': coins_earned},
            )
    except (OperationalError, InterfaceError) as exc:
        raise classify_database_error(exc) from exc

    if not created and (str(source.student_id) != str(student_id) or source.coins_earned != coins_earned):
        raise RewardConflictError(
            f"Reward source {source_id} was already recorded with different values"
        )

    if created:
        logger.info(
            "Recorded reward %s: %s coins for student %s",
            source.id, coins_earned, student_id,
        )
    return source, created


def submit_reward(*, student_id: UUID, coins_earned: int,
                  source_id: Optional[UUID] = None):
    """
    Record a reward and make the first attempt to grant it.

    Only the delivery that created the source attempts the grant; redelivered
    sources are left to whatever already owns them. Transient ledger failures
    don't reach the caller: the attempt is recorded on the source and the
    recovery sweep picks it up later. Non-transient failures during the grant
    mark the source failed.

    Returns:
        Tuple (RewardSource, created), the source reloaded after the attempt
    """
    source, created = record_reward_source(
        student_id=student_id,
        coins_earned=coins_earned,
        source_id=source_id,
    )

    if created and claim_attempt(source.id) is not None:
        try:
            grant_reward(source.id)
        except TransientLedgerError as exc:
            record_attempt_failure(source.id, exc, retryable=True)
        except CurrencyServiceError as exc:
            record_attempt_failure(source.id, exc, retryable=False)

    source.refresh_from_db()
    return source, created
