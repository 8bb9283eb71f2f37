"""
Durable retry bookkeeping for reward sources.

Both the request path (``submit_reward``) and the recovery sweep record
their attempts here, so a source's retry state survives restarts and is
the same no matter which path last touched it.
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.rewards.models import RewardSource, RewardStatus

logger = logging.getLogger(__name__)

# Longest error text kept on the source row
MAX_ERROR_LENGTH = 1000


def backoff_delay(attempts, base_delay=None):
    """Seconds to wait before the next attempt: base * 2^(attempts - 1)."""
    if base_delay is None:
        base_delay = settings.REWARD_RECOVERY_BASE_DELAY_SECONDS
    return timedelta(seconds=base_delay * 2 ** max(attempts - 1, 0))


def claim_attempt(source_id, *, now=None):
    """
    Mark a source as processing and count the attempt.

    Commits on its own, before the grant is tried, so a crash mid-grant
    still leaves the attempt counted.

    Returns:
        The updated RewardSource, or None if it is already completed or failed
    """
    now = now or timezone.now()

    with transaction.atomic():
        source = (
            RewardSource.objects
            .select_for_update()
            .filter(id=source_id)
            .first()
        )
        if source is None or source.is_terminal:
            return None

        source.status = RewardStatus.PROCESSING
        source.attempts += 1
        source.last_attempt_at = now
        source.next_attempt_at = None
        source.save(update_fields=[
            'status', 'attempts', 'last_attempt_at', 'next_attempt_at', 'updated_at',
        ])

    return source


def record_attempt_failure(source_id, error, *, retryable=True, now=None,
                           max_attempts=None, base_delay=None):
    """
    Record a failed grant attempt.

    Retryable failures with attempts left go back to pending with a backoff
    delay. Anything else ends in failed, for manual review. A source that
    another worker completed in the meantime is left untouched.

    Returns:
        The RewardSource as stored
    """
    now = now or timezone.now()
    if max_attempts is None:
        max_attempts = settings.REWARD_RECOVERY_MAX_ATTEMPTS

    with transaction.atomic():
        source = RewardSource.objects.select_for_update().get(id=source_id)
        if source.status == RewardStatus.COMPLETED:
            return source

        source.last_error = f"{type(error).__name__}: {error}"[:MAX_ERROR_LENGTH]

        if retryable and source.attempts < max_attempts:
            source.status = RewardStatus.PENDING
            source.next_attempt_at = now + backoff_delay(source.attempts, base_delay)
        else:
            source.status = RewardStatus.FAILED
            source.next_attempt_at = None

        source.save(update_fields=['status', 'next_attempt_at', 'last_error', 'updated_at'])

    if source.status == RewardStatus.FAILED:
        logger.error(
            "Reward %s failed after %s attempt(s) and needs manual review: "
            "student=%s coins=%s error=%s",
            source.id, source.attempts, source.student_id,
            source.coins_earned, source.last_error,
        )
    else:
        logger.warning(
            "Reward %s attempt %s failed, retrying at %s: %s",
            source.id, source.attempts, source.next_attempt_at.isoformat(),
            source.last_error,
        )

    return source
