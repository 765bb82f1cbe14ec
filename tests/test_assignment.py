"""
Bulk assignment of a structure to a class, wallet auto-application, unassignment, adjustments.
"""
from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from classes.models import ClassEnrollment, SchoolClass
from core.exceptions import InvalidInputError, NotFoundError
from fees.models import StudentFee
from fees.services.ledger import apply_discount_or_fine, fees_for_student
from fees.services.propagation import assign_structure_to_class, unassign_fee
from fees.services.structures import update_structure
from payments.models import FeeTransaction
from payments.services import collect_fee
from students.models import StudentProfile, WalletEntry
from tests.base import LedgerFixturesMixin


class AssignStructureTests(LedgerFixturesMixin, TestCase):
    def test_creates_one_row_per_enrolled_student(self):
        students = [self.make_student() for _ in range(3)]
        structure = self.make_structure("250.00")

        result = assign_structure_to_class(self.school_class.pk, structure.pk, collected_by=self.admin)

        self.assertEqual(result["created"], 3)
        self.assertEqual(result["skipped"], 0)
        rows = StudentFee.objects.filter(fee_structure=structure)
        self.assertEqual(sorted(r.student_profile_id for r in rows), sorted(s.pk for s in students))
        for row in rows:
            self.assertEqual(row.base_amount, Decimal("250.00"))
            self.assertEqual(row.total_payable, Decimal("250.00"))
            self.assertEqual(row.due_amount, Decimal("250.00"))
            self.assertEqual(row.status, StudentFee.STATUS_UNPAID)
            self.assertEqual(row.due_date, self.future)
            self.assertEqual(row.academic_year, "2025-2026")

    def test_second_run_creates_nothing(self):
        self.make_student()
        structure = self.make_structure()
        assign_structure_to_class(self.school_class.pk, structure.pk)

        again = assign_structure_to_class(self.school_class.pk, structure.pk)

        self.assertEqual(again["created"], 0)
        self.assertEqual(again["skipped"], 1)
        self.assertEqual(StudentFee.objects.filter(fee_structure=structure).count(), 1)

    def test_new_student_picked_up_on_rerun(self):
        self.make_student()
        structure = self.make_structure()
        assign_structure_to_class(self.school_class.pk, structure.pk)
        late = self.make_student()

        again = assign_structure_to_class(self.school_class.pk, structure.pk)

        self.assertEqual(again["created"], 1)
        self.assertTrue(StudentFee.objects.filter(fee_structure=structure, student_profile=late).exists())

    def test_wallet_balance_auto_applied(self):
        student = self.make_student(wallet="80.00")
        structure = self.make_structure("200.00")

        result = assign_structure_to_class(self.school_class.pk, structure.pk, collected_by=self.admin)

        self.assertEqual(result["auto_applied_students"], 1)
        self.assertEqual(result["total_auto_applied"], Decimal("80.00"))
        row = StudentFee.objects.get(student_profile=student, fee_structure=structure)
        self.assertEqual(row.paid_amount, Decimal("80.00"))
        self.assertEqual(row.due_amount, Decimal("120.00"))
        self.assertEqual(row.status, StudentFee.STATUS_PARTIAL)
        self.assertEqual(StudentProfile.objects.get(pk=student.pk).wallet_balance, Decimal("0.00"))

        txn = FeeTransaction.objects.get(student_fee=row)
        self.assertEqual(txn.method, FeeTransaction.METHOD_WALLET)
        self.assertEqual(txn.amount, Decimal("80.00"))
        self.assertTrue(txn.transaction_id.startswith("TXN-AUTO-"))
        self.assertEqual(txn.collected_by, self.admin)
        debit = WalletEntry.objects.get(student_profile=student, reason=WalletEntry.REASON_AUTO_APPLIED)
        self.assertEqual(debit.amount_delta, Decimal("-80.00"))
        self.assertEqual(debit.fee_transaction, txn)

    def test_wallet_larger_than_base_pays_in_full(self):
        student = self.make_student(wallet="300.00")
        structure = self.make_structure("200.00")

        assign_structure_to_class(self.school_class.pk, structure.pk)

        row = StudentFee.objects.get(student_profile=student)
        self.assertEqual(row.status, StudentFee.STATUS_PAID)
        self.assertEqual(StudentProfile.objects.get(pk=student.pk).wallet_balance, Decimal("100.00"))

    def test_left_and_soft_deleted_students_skipped(self):
        active = self.make_student()
        gone = self.make_student()
        ClassEnrollment.objects.filter(student_profile=gone).update(active=False, left_at=timezone.now())
        deleted = self.make_student()
        deleted.deleted_at = timezone.now()
        deleted.save()
        structure = self.make_structure()

        result = assign_structure_to_class(self.school_class.pk, structure.pk)

        self.assertEqual(result["created"], 1)
        self.assertEqual(StudentFee.objects.get(fee_structure=structure).student_profile_id, active.pk)

    def test_validation(self):
        structure = self.make_structure()
        with self.assertRaises(NotFoundError):
            assign_structure_to_class(self.school_class.pk, 999999)
        with self.assertRaises(NotFoundError):
            # no students enrolled yet
            assign_structure_to_class(self.school_class.pk, structure.pk)

        other_class = SchoolClass.objects.create(organization=self.org, name="Grade 6 B", year="2025-2026")
        with self.assertRaises(InvalidInputError):
            assign_structure_to_class(other_class.pk, structure.pk)

        self.make_student()
        update_structure(structure.pk, is_active=False)
        with self.assertRaises(InvalidInputError):
            assign_structure_to_class(self.school_class.pk, structure.pk)


class UnassignTests(LedgerFixturesMixin, TestCase):
    def test_paid_amount_returns_to_wallet(self):
        student = self.make_student()
        structure = self.make_structure("300.00")
        assign_structure_to_class(self.school_class.pk, structure.pk)
        fee = StudentFee.objects.get(student_profile=student)
        txn = collect_fee(fee.pk, Decimal("120.00"), "cash")["transaction"]

        result = unassign_fee(fee.pk)

        self.assertEqual(result["credited"], Decimal("120.00"))
        self.assertFalse(StudentFee.objects.filter(pk=fee.pk).exists())
        self.assertEqual(StudentProfile.objects.get(pk=student.pk).wallet_balance, Decimal("120.00"))
        txn.refresh_from_db()
        self.assertIsNone(txn.student_fee_id)
        self.assertIn("Fee unassigned", txn.remarks)
        self.assertTrue(WalletEntry.objects.filter(reason=WalletEntry.REASON_UNASSIGNED).exists())

    def test_unpaid_row_moves_no_money(self):
        student = self.make_student()
        structure = self.make_structure()
        assign_structure_to_class(self.school_class.pk, structure.pk)
        fee = StudentFee.objects.get(student_profile=student)

        unassign_fee(fee.pk)

        self.assertFalse(WalletEntry.objects.exists())
        with self.assertRaises(NotFoundError):
            unassign_fee(fee.pk)


class AdjustmentTests(LedgerFixturesMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.student = self.make_student()
        structure = self.make_structure("500.00")
        assign_structure_to_class(self.school_class.pk, structure.pk)
        self.fee = StudentFee.objects.get(student_profile=self.student)

    def test_discount_and_fine(self):
        fee = apply_discount_or_fine(self.fee.pk, discount_amount="50", fine_amount="20", remarks="Sibling discount")
        self.assertEqual(fee.total_payable, Decimal("470.00"))
        self.assertEqual(fee.due_amount, Decimal("470.00"))
        self.assertIn("Sibling discount", fee.remarks)

    def test_discount_below_paid_moves_no_money(self):
        collect_fee(self.fee.pk, Decimal("450.00"), "cash")
        fee = apply_discount_or_fine(self.fee.pk, discount_amount="100")

        self.assertEqual(fee.total_payable, Decimal("400.00"))
        self.assertEqual(fee.paid_amount, Decimal("450.00"))
        self.assertEqual(fee.due_amount, Decimal("0.00"))
        self.assertEqual(fee.status, StudentFee.STATUS_PAID)
        self.assertEqual(StudentProfile.objects.get(pk=self.student.pk).wallet_balance, Decimal("0.00"))

    def test_overdue_after_due_date_passes(self):
        StudentFee.objects.filter(pk=self.fee.pk).update(due_date=timezone.localdate() - timedelta(days=1))
        fee = apply_discount_or_fine(self.fee.pk, fine_amount="25")
        self.assertEqual(fee.status, StudentFee.STATUS_OVERDUE)
        self.assertEqual(fee.due_amount, Decimal("525.00"))

    def test_negative_or_empty_rejected(self):
        with self.assertRaises(InvalidInputError):
            apply_discount_or_fine(self.fee.pk, discount_amount="-1")
        with self.assertRaises(InvalidInputError):
            apply_discount_or_fine(self.fee.pk)
        with self.assertRaises(NotFoundError):
            apply_discount_or_fine(999999, fine_amount="1")

    def test_fees_for_student(self):
        self.assertEqual([f.pk for f in fees_for_student(self.student)], [self.fee.pk])
