"""
Balance aggregator.

Two read paths over the same number: the ledger sum (authoritative, used by
audits and tests) and the cached ``Student.currency_balance`` (fast reads).
Neither may be used to decide a debit; ``update_balance`` re-reads the
balance under the student lock.
"""

from dataclasses import dataclass
from uuid import UUID

from django.db import transaction
from django.db.models import Sum, Value
from django.db.models.functions import Coalesce

from apps.classrooms.models import Student
from apps.currency.exceptions import StudentNotFoundError
from apps.currency.models import CurrencyTransaction


@dataclass(frozen=True)
class BalanceSnapshot:
    student_id: UUID
    cached: int
    authoritative: int

    @property
    def in_sync(self) -> bool:
        return self.cached == self.authoritative


def authoritative_balance(student_id: UUID) -> int:
    """``COALESCE(SUM(amount), 0)`` over every ledger row of the student."""
    return CurrencyTransaction.objects.filter(
        student_id=student_id
    ).aggregate(
        total=Coalesce(Sum('amount'), Value(0))
    )['total']


def cached_balance(student_id: UUID) -> int:
    """Materialized balance stored on the student row."""
    try:
        return Student.objects.values_list(
            'currency_balance', flat=True
        ).get(id=student_id)
    except Student.DoesNotExist:
        raise StudentNotFoundError(f"Student with ID {student_id} not found")


def balance_snapshot(student_id: UUID) -> BalanceSnapshot:
    """
    Both balances side by side, for audit and admin views.

    Reads under the student lock so a concurrent write cannot land between
    the two reads.
    """
    with transaction.atomic():
        try:
            cached = Student.objects.select_for_update().values_list(
                'currency_balance', flat=True
            ).get(id=student_id)
        except Student.DoesNotExist:
            raise StudentNotFoundError(f"Student with ID {student_id} not found")

        return BalanceSnapshot(
            student_id=student_id,
            cached=cached,
            authoritative=authoritative_balance(student_id),
        )
