from django.db import models
import uuid


class RewardStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PROCESSING = 'processing', 'Processing'
    COMPLETED = 'completed', 'Completed'
    FAILED = 'failed', 'Failed'


class RewardSource(models.Model):
    """
    An event that earns a student coins at most once (a quiz submission).

    The primary key is the idempotency key. ``transaction`` is the processed
    marker: it is set in the same database transaction that writes the earn
    row, so "coins were granted" and "this source was handled" can't
    disagree. Retry bookkeeping (``attempts``, ``next_attempt_at``,
    ``last_error``) lives here too, which keeps the recovery sweep stateless.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    student = models.ForeignKey(
        'classrooms.Student',
        on_delete=models.CASCADE,
        related_name='reward_sources'
    )
    coins_earned = models.PositiveIntegerField()

    status = models.CharField(
        max_length=20,
        choices=RewardStatus.choices,
        default=RewardStatus.PENDING
    )
    attempts = models.PositiveIntegerField(default=0)
    last_attempt_at = models.DateTimeField(null=True, blank=True)
    next_attempt_at = models.DateTimeField(null=True, blank=True)
    last_error = models.TextField(blank=True)

    transaction = models.OneToOneField(
        'currency.CurrencyTransaction',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='reward_source'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'reward_sources'
        indexes = [
            models.Index(fields=['status', 'next_attempt_at'], name='reward_status_next_idx'),
            models.Index(fields=['status', 'last_attempt_at'], name='reward_status_last_idx'),
            models.Index(fields=['student', 'created_at'], name='reward_student_created_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(status=RewardStatus.COMPLETED) | models.Q(completed_at__isnull=False),
                name='check_completed_reward_has_timestamp',
            ),
        ]
        ordering = ['created_at']

    def __str__(self):
        return f"Reward {self.id} ({self.coins_earned} coins, {self.status})"

    @property
    def is_terminal(self):
        return self.status in (RewardStatus.COMPLETED, RewardStatus.FAILED)
