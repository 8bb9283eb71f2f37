"""
Management command running the reward recovery sweep.

Usage:
    python manage.py run_recovery_sweep --once
    python manage.py run_recovery_sweep --interval 300
    python manage.py run_recovery_sweep --interval 300 --reconcile
"""

from django.conf import settings
from django.core.management.base import BaseCommand

from apps.currency.services import BalanceDivergenceError, reconcile_balances
from apps.rewards.services import RecoveryTaskManager


class Command(BaseCommand):
    help = 'Retry reward grants that never completed'

    def add_arguments(self, parser):
        parser.add_argument(
            '--once',
            action='store_true',
            help='Run a single sweep and exit',
        )
        parser.add_argument(
            '--interval',
            type=int,
            default=settings.REWARD_RECOVERY_INTERVAL_SECONDS,
            help='Seconds between sweeps when looping',
        )
        parser.add_argument(
            '--reconcile',
            action='store_true',
            help='Also check cached balances against the ledger on every sweep',
        )

    def handle(self, *args, **options):
        manager = RecoveryTaskManager()

        if options['once']:
            self._sweep(manager, options['reconcile'])
            return

        self.stdout.write(f"Sweeping every {options['interval']}s (Ctrl+C to stop)")
        try:
            manager.run_forever(
                options['interval'],
                after_sweep=self._after_sweep if options['reconcile'] else None,
            )
        except KeyboardInterrupt:
            self.stdout.write('Stopped.')

    def _sweep(self, manager, reconcile):
        report = manager.sweep()
        self.stdout.write(
            self.style.SUCCESS(
                f'Scanned {report.scanned}: {report.completed} completed, '
                f'{report.rescheduled} rescheduled, {report.failed} failed'
            )
        )
        if reconcile:
            self._reconcile()

    def _after_sweep(self, report):
        self._reconcile()

    def _reconcile(self):
        try:
            report = reconcile_balances()
        except BalanceDivergenceError as e:
            self.stderr.write(self.style.ERROR(str(e)))
            return
        self.stdout.write(f'Balances OK for {report.students_checked} student(s)')

