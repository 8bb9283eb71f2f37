from django.db import models
import uuid

from .exceptions import ImmutableLedgerError


class TransactionType(models.TextChoices):
    EARN = 'earn', 'Earn'
    SPEND = 'spend', 'Spend'
    GRANT = 'grant', 'Grant'
    DEDUCT = 'deduct', 'Deduct'

    @property
    def is_debit(self):
        return self in (TransactionType.SPEND, TransactionType.DEDUCT)


CREDIT_TYPES = [TransactionType.EARN, TransactionType.GRANT]
DEBIT_TYPES = [TransactionType.SPEND, TransactionType.DEDUCT]


class LedgerQuerySet(models.QuerySet):
    """Ledger rows can be read and inserted, never updated or deleted."""

    def update(self, **kwargs):
        raise ImmutableLedgerError('Ledger rows cannot be updated.')

    def delete(self):
        raise ImmutableLedgerError('Ledger rows cannot be deleted.')


class CurrencyTransaction(models.Model):
    """
    One immutable ledger row.

    ``amount`` is signed: positive rows are credits (earn, grant), negative
    rows are debits (spend, deduct). Corrections are new rows of the
    opposite sign. The sum of a student's rows is their authoritative
    balance.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    student = models.ForeignKey(
        'classrooms.Student',
        on_delete=models.PROTECT,
        related_name='currency_transactions'
    )

    # Null for system rows (quiz rewards) and when the actor is deleted
    actor = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='currency_transactions'
    )

    amount = models.IntegerField()
    transaction_type = models.CharField(max_length=10, choices=TransactionType.choices)
    description = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    objects = LedgerQuerySet.as_manager()

    class Meta:
        db_table = 'currency_transactions'
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(transaction_type__in=CREDIT_TYPES, amount__gt=0) |
                    models.Q(transaction_type__in=DEBIT_TYPES, amount__lt=0)
                ),
                name='check_transaction_amount_sign',
            ),
        ]
        indexes = [
            models.Index(fields=['student', 'created_at'], name='ctx_student_created_idx'),
            models.Index(fields=['transaction_type', 'created_at'], name='ctx_type_created_idx'),
        ]
        ordering = ['created_at']

    def __str__(self):
        return f"{self.transaction_type} {self.amount:+d} for {self.student_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableLedgerError('Ledger rows cannot be updated.')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableLedgerError('Ledger rows cannot be deleted.')

    @property
    def details(self):
        """Metadata as its typed variant (None for rows without metadata)."""
        from .metadata import parse_metadata

        if not self.metadata:
            return None
        return parse_metadata(self.transaction_type, self.metadata)
