"""
Fee catalog and structure registry, including amount and due-date propagation.
"""
from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone

from classes.models import SchoolClass
from core.exceptions import ConflictError, InvalidInputError, NotFoundError, PropagationError
from fees.models import FeeCategory, FeeStructure, StudentFee
from fees.services import categories
from fees.services.ledger import apply_discount_or_fine
from fees.services.propagation import assign_structure_to_class
from fees.services.structures import create_structure, delete_structure, list_structures_for_class, update_structure
from payments.services import collect_fee
from students.models import StudentProfile, WalletEntry
from tests.base import LedgerFixturesMixin


class FeeCategoryTests(LedgerFixturesMixin, TestCase):
    def test_name_is_normalized(self):
        category = categories.create_category("  transport ")
        self.assertEqual(category.name, "TRANSPORT")

    def test_duplicate_name_conflicts(self):
        with self.assertRaises(ConflictError):
            categories.create_category("tuition")

    def test_blank_name_rejected(self):
        with self.assertRaises(InvalidInputError):
            categories.create_category("   ")

    def test_rename_onto_existing_conflicts(self):
        other = categories.create_category("LIBRARY")
        with self.assertRaises(ConflictError):
            categories.update_category(other.pk, name="Tuition")

    def test_delete_blocked_while_in_use(self):
        self.make_structure()
        with self.assertRaises(ConflictError):
            categories.delete_category(self.category.pk)

    def test_delete_unused(self):
        other = categories.create_category("LAB")
        categories.delete_category(other.pk)
        self.assertFalse(FeeCategory.objects.filter(pk=other.pk).exists())
        with self.assertRaises(NotFoundError):
            categories.delete_category(other.pk)


class CreateStructureTests(LedgerFixturesMixin, TestCase):
    def test_title_derived_from_category_and_class(self):
        structure = self.make_structure("1200.00")
        self.assertEqual(structure.title, "TUITION - Grade 5 A (2025-2026)")
        self.assertEqual(structure.amount, Decimal("1200.00"))

    def test_duplicate_conflicts(self):
        self.make_structure()
        with self.assertRaises(ConflictError):
            self.make_structure("300.00")

    def test_validation(self):
        with self.assertRaises(NotFoundError):
            create_structure(999999, self.category.pk, Decimal("10"), self.future)
        with self.assertRaises(NotFoundError):
            create_structure(self.school_class.pk, 999999, Decimal("10"), self.future)
        with self.assertRaises(InvalidInputError):
            create_structure(self.school_class.pk, self.category.pk, Decimal("0"), self.future)
        with self.assertRaises(InvalidInputError):
            create_structure(
                self.school_class.pk, self.category.pk, Decimal("10"),
                timezone.localdate() - timedelta(days=1),
            )

    def test_inactive_class_or_category_rejected(self):
        closed = SchoolClass.objects.create(name="Old", year="2019-2020", is_active=False)
        with self.assertRaises(InvalidInputError):
            create_structure(closed.pk, self.category.pk, Decimal("10"), self.future)
        retired = FeeCategory.objects.create(name="RETIRED", is_active=False)
        with self.assertRaises(InvalidInputError):
            create_structure(self.school_class.pk, retired.pk, Decimal("10"), self.future)

    def test_list_for_class_ordered_by_due_date(self):
        late = create_structure(
            self.school_class.pk, FeeCategory.objects.create(name="LAB").pk,
            Decimal("50"), self.future + timedelta(days=10),
        )
        early = self.make_structure()
        self.assertEqual(list(list_structures_for_class(self.school_class.pk)), [early, late])


class UpdateStructureTests(LedgerFixturesMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.student = self.make_student()
        self.structure = self.make_structure("500.00")
        assign_structure_to_class(self.school_class.pk, self.structure.pk)
        self.fee = StudentFee.objects.get(student_profile=self.student, fee_structure=self.structure)

    def test_requires_a_field(self):
        with self.assertRaises(InvalidInputError):
            update_structure(self.structure.pk)

    def test_missing_structure(self):
        with self.assertRaises(NotFoundError):
            update_structure(999999, amount=Decimal("10"))

    def test_fine_discount_payment_then_reduction_moves_surplus_to_wallet(self):
        apply_discount_or_fine(self.fee.pk, discount_amount=Decimal("50"), fine_amount=Decimal("20"))
        self.fee.refresh_from_db()
        self.assertEqual(self.fee.total_payable, Decimal("470.00"))

        collect_fee(self.fee.pk, Decimal("470.00"), "cash")
        self.fee.refresh_from_db()
        self.assertEqual(self.fee.status, StudentFee.STATUS_PAID)

        structure, summary = update_structure(self.structure.pk, amount=Decimal("400.00"))
        self.assertEqual(structure.amount, Decimal("400.00"))
        self.assertEqual(summary["total_credited"], Decimal("100.00"))

        self.fee.refresh_from_db()
        self.student.refresh_from_db()
        self.assertEqual(self.fee.base_amount, Decimal("400.00"))
        self.assertEqual(self.fee.total_payable, Decimal("370.00"))
        self.assertEqual(self.fee.paid_amount, Decimal("370.00"))
        self.assertEqual(self.fee.due_amount, Decimal("0.00"))
        self.assertEqual(self.fee.status, StudentFee.STATUS_PAID)
        self.assertEqual(self.student.wallet_balance, Decimal("100.00"))
        self.assertIn("Fee adjusted: 500.00 -> 400.00", self.fee.remarks)
        entry = WalletEntry.objects.get(student_profile=self.student)
        self.assertEqual(entry.reason, WalletEntry.REASON_FEE_REDUCED)
        self.assertEqual(entry.student_fee_id, self.fee.pk)

    def test_increase_keeps_paid_and_reopens_balance(self):
        collect_fee(self.fee.pk, Decimal("500.00"), "upi")
        update_structure(self.structure.pk, amount=Decimal("650.00"))

        self.fee.refresh_from_db()
        self.assertEqual(self.fee.paid_amount, Decimal("500.00"))
        self.assertEqual(self.fee.due_amount, Decimal("150.00"))
        self.assertEqual(self.fee.status, StudentFee.STATUS_PARTIAL)
        self.assertEqual(StudentProfile.objects.get(pk=self.student.pk).wallet_balance, Decimal("0.00"))

    def test_due_date_change_reaches_rows(self):
        new_date = self.future + timedelta(days=15)
        update_structure(self.structure.pk, due_date=new_date)
        self.fee.refresh_from_db()
        self.assertEqual(self.fee.due_date, new_date)
        self.assertIn("Due date changed", self.fee.remarks)

    def test_due_date_in_past_rejected(self):
        with self.assertRaises(InvalidInputError):
            update_structure(self.structure.pk, due_date=timezone.localdate() - timedelta(days=1))

    def test_title_clash_conflicts(self):
        other = FeeStructure.objects.create(
            school_class=self.school_class, category=self.category,
            title="Term 2", amount=Decimal("100"), due_date=self.future,
        )
        with self.assertRaises(ConflictError):
            update_structure(self.structure.pk, title=other.title)

    def test_failed_batch_rolls_back_everything(self):
        collect_fee(self.fee.pk, Decimal("500.00"), "cash")
        with mock.patch.object(StudentFee.objects, "bulk_update", side_effect=DatabaseError("disk full")):
            with self.assertRaises(PropagationError) as ctx:
                update_structure(self.structure.pk, amount=Decimal("300.00"))

        self.assertEqual(ctx.exception.structure_id, self.structure.pk)
        self.assertEqual(ctx.exception.failed_ledger_ids, [self.fee.pk])
        self.structure.refresh_from_db()
        self.fee.refresh_from_db()
        self.assertEqual(self.structure.amount, Decimal("500.00"))
        self.assertEqual(self.fee.paid_amount, Decimal("500.00"))
        self.assertEqual(StudentProfile.objects.get(pk=self.student.pk).wallet_balance, Decimal("0.00"))
        self.assertFalse(WalletEntry.objects.exists())


class DeleteStructureTests(LedgerFixturesMixin, TestCase):
    def test_cascade_refunds_paid_amounts_and_keeps_transactions(self):
        first = self.make_student()
        second = self.make_student()
        third = self.make_student()
        structure = self.make_structure("500.00")
        assign_structure_to_class(self.school_class.pk, structure.pk)

        fees = {f.student_profile_id: f for f in StudentFee.objects.filter(fee_structure=structure)}
        txn_a = collect_fee(fees[first.pk].pk, Decimal("100.00"), "cash")["transaction"]
        txn_b = collect_fee(fees[second.pk].pk, Decimal("50.00"), "card")["transaction"]

        summary = delete_structure(structure.pk)

        self.assertEqual(summary["deleted_fees"], 3)
        self.assertEqual(summary["refunded_students"], 2)
        self.assertEqual(summary["total_refunded"], Decimal("150.00"))
        self.assertFalse(FeeStructure.objects.filter(pk=structure.pk).exists())
        self.assertFalse(StudentFee.objects.filter(fee_structure_id=structure.pk).exists())

        balances = dict(StudentProfile.objects.filter(
            pk__in=[first.pk, second.pk, third.pk]).values_list("pk", "wallet_balance"))
        self.assertEqual(balances[first.pk], Decimal("100.00"))
        self.assertEqual(balances[second.pk], Decimal("50.00"))
        self.assertEqual(balances[third.pk], Decimal("0.00"))

        for txn in (txn_a, txn_b):
            txn.refresh_from_db()
            self.assertIsNone(txn.student_fee_id)
            self.assertIn("Fee structure deleted", txn.remarks)
        self.assertEqual(
            WalletEntry.objects.filter(reason=WalletEntry.REASON_STRUCTURE_DELETED).count(), 2,
        )

    def test_missing_structure(self):
        with self.assertRaises(NotFoundError):
            delete_structure(999999)
