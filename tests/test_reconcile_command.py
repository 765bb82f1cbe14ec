"""
reconcile_fees management command: dry run by default, --apply re-derives ledger rows.
"""
from datetime import timedelta
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone

from fees.models import StudentFee
from fees.services.propagation import assign_structure_to_class
from students.models import StudentProfile
from tests.base import LedgerFixturesMixin


class ReconcileFeesCommandTests(LedgerFixturesMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.student = self.make_student()
        structure = self.make_structure("300.00")
        assign_structure_to_class(self.school_class.pk, structure.pk)
        self.fee = StudentFee.objects.get(student_profile=self.student)
        # due date passed since the row was last written
        StudentFee.objects.filter(pk=self.fee.pk).update(due_date=timezone.localdate() - timedelta(days=1))

    def run_command(self, *args):
        out = StringIO()
        call_command("reconcile_fees", *args, stdout=out)
        return out.getvalue()

    def test_dry_run_reports_without_changes(self):
        output = self.run_command()
        self.assertIn("DRY RUN", output)
        self.assertIn("Ledger rows out of date: 1", output)
        self.fee.refresh_from_db()
        self.assertEqual(self.fee.status, StudentFee.STATUS_UNPAID)

    def test_apply_rederives_rows(self):
        output = self.run_command("--apply")
        self.assertIn("Re-derived 1 ledger rows", output)
        self.fee.refresh_from_db()
        self.assertEqual(self.fee.status, StudentFee.STATUS_OVERDUE)
        self.assertIn("Ledger rows out of date: 0", self.run_command())

    def test_wallet_mismatch_reported_not_fixed(self):
        StudentProfile.objects.filter(pk=self.student.pk).update(wallet_balance=Decimal("15.00"))
        output = self.run_command("--apply")
        self.assertIn("Wallets not matching their entries: 1", output)
        self.assertEqual(StudentProfile.objects.get(pk=self.student.pk).wallet_balance, Decimal("15.00"))
