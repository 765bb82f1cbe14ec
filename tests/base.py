"""
Shared fixtures for fee ledger tests: an admin, a class with a category, students.
"""
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from accounts.models import User
from classes.models import SchoolClass, ClassEnrollment
from core.models import Organization
from fees.models import FeeCategory
from fees.services.structures import create_structure
from students.models import WalletEntry
from students.wallet import credit_wallet


class LedgerFixturesMixin:
    def setUp(self):
        self.org = Organization.objects.create(name="Test School", slug="test-school")
        self.admin = User.objects.create_user(
            email="admin@test.com",
            password="pass123",
            full_name="Admin",
            role="admin",
            organization=self.org,
        )
        self.school_class = SchoolClass.objects.create(
            organization=self.org, name="Grade 5 A", year="2025-2026",
        )
        self.category = FeeCategory.objects.create(name="TUITION")
        self.future = timezone.localdate() + timedelta(days=30)
        self._student_seq = 0

    def make_student(self, full_name=None, enroll=True, wallet=None):
        self._student_seq += 1
        user = User.objects.create_user(
            email=f"student{self._student_seq}@test.com",
            password="pass123",
            full_name=full_name or f"Student {self._student_seq}",
            role="student",
            organization=self.org,
        )
        profile = user.student_profile
        if enroll:
            ClassEnrollment.objects.create(school_class=self.school_class, student_profile=profile)
        if wallet:
            credit_wallet(profile, Decimal(wallet), WalletEntry.REASON_OVERPAYMENT, note="opening balance")
        return profile

    def make_structure(self, amount="500.00", category=None, school_class=None):
        return create_structure(
            (school_class or self.school_class).pk,
            (category or self.category).pk,
            Decimal(amount),
            self.future,
        )
