"""
Balance reconciliation.

Compares every cached balance against its ledger sum. The two are written
in the same transaction, so any difference is a bug: it is reported and
raised, never silently corrected.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from django.db.models import Sum, Value
from django.db.models.functions import Coalesce

from apps.classrooms.models import Student
from apps.currency.exceptions import BalanceDivergenceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceDivergence:
    student_id: UUID
    cached: int
    ledger_total: int

    @property
    def difference(self) -> int:
        return self.cached - self.ledger_total


@dataclass
class ReconciliationReport:
    students_checked: int = 0
    divergences: List[BalanceDivergence] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.divergences


def check_balances(student_ids: Optional[List[UUID]] = None) -> ReconciliationReport:
    """Compare cached balances with ledger sums without raising."""
    students = Student.objects.annotate(
        ledger_total=Coalesce(Sum('currency_transactions__amount'), Value(0))
    ).order_by('id')

    if student_ids:
        students = students.filter(id__in=student_ids)

    report = ReconciliationReport()
    for row in students.values('id', 'currency_balance', 'ledger_total').iterator():
        report.students_checked += 1
        if row['currency_balance'] != row['ledger_total']:
            report.divergences.append(BalanceDivergence(
                student_id=row['id'],
                cached=row['currency_balance'],
                ledger_total=row['ledger_total'],
            ))

    return report


def find_balance_divergences(student_ids: Optional[List[UUID]] = None) -> List[BalanceDivergence]:
    return check_balances(student_ids).divergences


def reconcile_balances(student_ids: Optional[List[UUID]] = None) -> ReconciliationReport:
    """
    Run a reconciliation pass and fail loudly on any divergence.

    Raises:
        BalanceDivergenceError: If any cached balance differs from its ledger sum
    """
    report = check_balances(student_ids)

    for divergence in report.divergences:
        logger.error(
            "Balance divergence for student %s: cached=%s ledger=%s difference=%+d",
            divergence.student_id,
            divergence.cached,
            divergence.ledger_total,
            divergence.difference,
        )

    if not report.ok:
        raise BalanceDivergenceError(report.divergences)

    logger.info("Reconciled %s student balance(s), no divergence", report.students_checked)
    return report
