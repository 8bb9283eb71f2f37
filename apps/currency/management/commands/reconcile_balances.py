"""
Management command comparing cached balances with the ledger.

Meant to run on a schedule (cron, Render job). Exits non-zero when any
student's cached balance differs from the sum of their ledger rows.

Usage:
    python manage.py reconcile_balances
    python manage.py reconcile_balances --student <uuid> --student <uuid>
"""

from django.core.management.base import BaseCommand, CommandError

from apps.currency.services import BalanceDivergenceError, reconcile_balances


class Command(BaseCommand):
    help = 'Check every cached student balance against the ledger sum'

    def add_arguments(self, parser):
        parser.add_argument(
            '--student',
            action='append',
            dest='students',
            default=None,
            help='Only check this student ID (repeatable)',
        )

    def handle(self, *args, **options):
        try:
            report = reconcile_balances(options['students'])
        except BalanceDivergenceError as e:
            for divergence in e.divergences:
                self.stderr.write(
                    f'  - {divergence.student_id} | cached {divergence.cached} | '
                    f'ledger {divergence.ledger_total} | off by {divergence.difference:+d}'
                )
            raise CommandError(str(e))

        self.stdout.write(
            self.style.SUCCESS(
                f'Checked {report.students_checked} student(s). All balances match the ledger.'
            )
        )
