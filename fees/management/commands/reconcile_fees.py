"""
Ledger + wallet consistency check.
Finds StudentFee rows whose stored total/due/status disagree with the
derivation rule (overdue drift included) and wallets whose balance differs
from the sum of their WalletEntry deltas.
Usage: python manage.py reconcile_fees [--apply]
Without --apply: dry-run only (report, no changes).
With --apply: re-derives the ledger rows. Wallet mismatches are only reported.
"""
from django.core.management.base import BaseCommand
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from core.utils import money
from fees.models import StudentFee
from fees.services.ledger import is_consistent, recompute
from students.models import StudentProfile


class Command(BaseCommand):
    help = 'Check fee ledger rows and wallets; --apply re-derives stale ledger rows'

    def add_arguments(self, parser):
        parser.add_argument(
            '--apply',
            action='store_true',
            help='Apply fixes (default: dry-run only)',
        )

    def handle(self, *args, **options):
        apply = options['apply']
        if not apply:
            self.stdout.write(self.style.WARNING('DRY RUN - no changes will be made. Use --apply to fix.'))
        today = timezone.localdate()

        # 1) Ledger rows with stale derived fields
        stale_ids = [
            fee.pk for fee in StudentFee.objects.order_by('pk').iterator()
            if not is_consistent(fee, today)
        ]
        self.stdout.write(f'  Ledger rows out of date: {len(stale_ids)}')
        for fee_id in stale_ids[:5]:
            self.stdout.write(f'    StudentFee id={fee_id}')
        if len(stale_ids) > 5:
            self.stdout.write(f'    ... and {len(stale_ids) - 5} more')

        if stale_ids and apply:
            with transaction.atomic():
                rows = list(StudentFee.objects.select_for_update().filter(pk__in=stale_ids).order_by('pk'))
                for row in rows:
                    recompute(row, today)
                StudentFee.objects.bulk_update(rows, ['total_payable', 'due_amount', 'status'])
            self.stdout.write(self.style.SUCCESS(f'    Re-derived {len(rows)} ledger rows'))
        elif stale_ids:
            self.stdout.write(f'    Would re-derive {len(stale_ids)} ledger rows')

        # 2) Wallet balance vs wallet entries
        mismatched = []
        students = StudentProfile.objects.annotate(entry_total=Sum('wallet_entries__amount_delta')).order_by('pk')
        for student in students:
            expected = money(student.entry_total)
            if money(student.wallet_balance) != expected:
                mismatched.append((student.pk, money(student.wallet_balance), expected))
        self.stdout.write(f'  Wallets not matching their entries: {len(mismatched)}')
        for student_id, balance, expected in mismatched[:5]:
            self.stdout.write(f'    Student id={student_id}: balance={balance}, entries={expected}')
        if mismatched:
            self.stdout.write(self.style.WARNING('    Wallets are never auto-fixed; investigate manually'))

        summary = f'Done. stale_ledger_rows={len(stale_ids)} wallet_mismatches={len(mismatched)}'
        self.stdout.write(self.style.SUCCESS(summary) if not mismatched else summary)
