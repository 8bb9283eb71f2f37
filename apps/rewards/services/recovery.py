"""
Recovery of reward sources that never finished.

The manager keeps no state of its own. Everything it needs (status, attempt
count, next retry time, last error) is stored on ``RewardSource``, so a
restart loses nothing and several sweepers can run side by side; they
coordinate through row locks and ``grant_reward`` idempotence.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from apps.currency.exceptions import CurrencyServiceError, TransientLedgerError
from apps.rewards.exceptions import RewardSourceNotFoundError, RewardsServiceError
from apps.rewards.models import RewardSource, RewardStatus

from .attempts import record_attempt_failure
from .reward_processing import grant_reward

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepReport:
    scanned: int = 0
    completed: int = 0
    rescheduled: int = 0
    failed: int = 0


class RecoveryTaskManager:
    """
    Finds stuck reward sources and retries them with exponential backoff.

    A pending source is stuck once its retry time has come, or, if it was
    never scheduled, once it is older than ``stale_after``. A processing
    source is stuck when its last attempt started more than ``stale_after``
    ago; the worker that claimed it is presumed dead.
    """

    def __init__(self, max_attempts=None, base_delay=None, stale_after=None, batch_size=None):
        self.max_attempts = max_attempts or settings.REWARD_RECOVERY_MAX_ATTEMPTS
        self.base_delay = base_delay if base_delay is not None else settings.REWARD_RECOVERY_BASE_DELAY_SECONDS
        self.stale_after = timedelta(
            seconds=stale_after if stale_after is not None else settings.REWARD_RECOVERY_STALE_AFTER_SECONDS
        )
        self.batch_size = batch_size or settings.REWARD_RECOVERY_BATCH_SIZE

    def _stuck_filter(self, now):
        cutoff = now - self.stale_after
        return (
            Q(status=RewardStatus.PENDING, next_attempt_at__lte=now)
            | Q(status=RewardStatus.PENDING, next_attempt_at__isnull=True, created_at__lte=cutoff)
            | Q(status=RewardStatus.PROCESSING, last_attempt_at__lte=cutoff)
        )

    def find_stuck(self, now=None):
        """Stuck sources, oldest first, at most ``batch_size`` of them."""
        now = now or timezone.now()
        return list(
            RewardSource.objects
            .filter(self._stuck_filter(now))
            .order_by('created_at')[:self.batch_size]
        )

    def claim(self, source_id, now=None):
        """
        Take a stuck source for one attempt.

        The stuck condition is checked again under the row lock, so a source
        that another sweeper or the request path just handled is skipped.
        Sources that already used all their attempts are failed instead.

        Returns:
            The claimed RewardSource, or None if it is no longer stuck
        """
        now = now or timezone.now()

        with transaction.atomic():
            source = (
                RewardSource.objects
                .select_for_update()
                .filter(self._stuck_filter(now), id=source_id)
                .first()
            )
            if source is None:
                return None

            if source.attempts >= self.max_attempts:
                source.status = RewardStatus.FAILED
                source.next_attempt_at = None
                source.last_error = source.last_error or 'Retry attempts exhausted'
                source.save(update_fields=['status', 'next_attempt_at', 'last_error', 'updated_at'])
                logger.error(
                    "Reward %s exhausted %s attempt(s) and needs manual review: "
                    "student=%s coins=%s last_error=%s",
                    source.id, source.attempts, source.student_id,
                    source.coins_earned, source.last_error,
                )
                return None

            source.status = RewardStatus.PROCESSING
            source.attempts += 1
            source.last_attempt_at = now
            source.next_attempt_at = None
            source.save(update_fields=[
                'status', 'attempts', 'last_attempt_at', 'next_attempt_at', 'updated_at',
            ])

        return source

    def sweep(self, now=None) -> SweepReport:
        """Retry every stuck source once."""
        now = now or timezone.now()
        stuck = self.find_stuck(now)
        completed = rescheduled = failed = 0

        for candidate in stuck:
            source = self.claim(candidate.id, now)
            if source is None:
                if RewardSource.objects.filter(id=candidate.id, status=RewardStatus.FAILED).exists():
                    failed += 1
                continue

            try:
                grant_reward(source.id)
            except RewardSourceNotFoundError:
                logger.warning("Reward %s disappeared during recovery", source.id)
                continue
            except TransientLedgerError as exc:
                result = record_attempt_failure(
                    source.id, exc,
                    retryable=True,
                    now=now,
                    max_attempts=self.max_attempts,
                    base_delay=self.base_delay,
                )
            except (CurrencyServiceError, RewardsServiceError) as exc:
                result = record_attempt_failure(source.id, exc, retryable=False, now=now)
            else:
                completed += 1
                continue

            if result.status == RewardStatus.FAILED:
                failed += 1
            elif result.status == RewardStatus.PENDING:
                rescheduled += 1
            else:
                completed += 1

        report = SweepReport(
            scanned=len(stuck),
            completed=completed,
            rescheduled=rescheduled,
            failed=failed,
        )
        if report.scanned:
            logger.info(
                "Recovery sweep: scanned=%s completed=%s rescheduled=%s failed=%s",
                report.scanned, report.completed, report.rescheduled, report.failed,
            )
        return report

    def run_forever(self, interval=None, stop_event=None, after_sweep=None):
        """
        Sweep every ``interval`` seconds until ``stop_event`` is set.

        ``after_sweep`` is called with each SweepReport.

        A sweep that blows up is logged and the loop carries on with the next
        tick.
        """
        if interval is None:
            interval = settings.REWARD_RECOVERY_INTERVAL_SECONDS
        stop_event = stop_event or threading.Event()

        logger.info("Recovery loop started (interval %ss)", interval)
        while not stop_event.is_set():
            try:
                report = self.sweep()
                if after_sweep is not None:
                    after_sweep(report)
            except Exception:
                logger.exception("Recovery sweep crashed; retrying next interval")
            stop_event.wait(interval)
        logger.info("Recovery loop stopped")

    def status(self):
        """Number of reward sources in each status."""
        counts = RewardSource.objects.aggregate(
            **{
                value: Count('id', filter=Q(status=value))
                for value in RewardStatus.values
            }
        )
        return {key: counts[key] or 0 for key in RewardStatus.values}
