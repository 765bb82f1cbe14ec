"""
Student Profile (with surplus wallet), Parent-Child link, and wallet audit trail.
"""
from django.core.validators import MinValueValidator
from django.db import models
from accounts.models import User


class StudentProfile(models.Model):
    """
    Student Profile, OneToOne with User (role=student).
    wallet_balance holds money not applied to any bill; never negative.
    Soft delete: deleted_at set instead of row delete.
    """
    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='student_profile',
        limit_choices_to={'role': 'student'},
    )
    admission_no = models.CharField(max_length=50, unique=True, blank=True, null=True)
    wallet_balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0)],
        help_text="Surplus wallet; changed only through students.wallet",
    )
    is_deleted = models.BooleanField(default=False, db_index=True)
    deleted_at = models.DateTimeField(null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'student_profiles'
        verbose_name = 'Student Profile'
        verbose_name_plural = 'Student Profiles'
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(wallet_balance__gte=0),
                name='student_wallet_balance_non_negative',
            ),
        ]

    def __str__(self):
        return f"{self.user.full_name} ({self.user.email})"

    def save(self, *args, **kwargs):
        self.is_deleted = self.deleted_at is not None
        super().save(*args, **kwargs)

    @property
    def full_name(self):
        return self.user.full_name


class ParentChild(models.Model):
    """
    Parent-Child relationship (parent User -> student User).
    Grants a parent read access to the child's bills and receipts.
    """
    parent = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='parent_children',
        limit_choices_to={'role': 'parent'},
    )
    student = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='parent_links',
        limit_choices_to={'role': 'student'},
    )
    relation = models.CharField(max_length=50, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'parent_student'
        verbose_name = 'Parent-Child'
        verbose_name_plural = 'Parent-Child'
        unique_together = [['parent', 'student']]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.parent.full_name} -> {self.student.full_name}"


class WalletEntry(models.Model):
    """
    Wallet audit trail. One row per wallet mutation, each tagged with the
    event that caused it; balance_after is the wallet right after the change.
    """
    REASON_OVERPAYMENT = "OVERPAYMENT"
    REASON_FEE_REDUCED = "FEE_REDUCED"
    REASON_STRUCTURE_DELETED = "STRUCTURE_DELETED"
    REASON_UNASSIGNED = "UNASSIGNED"
    REASON_AUTO_APPLIED = "AUTO_APPLIED"

    REASON_CHOICES = [
        (REASON_OVERPAYMENT, "Overpayment"),
        (REASON_FEE_REDUCED, "Fee Reduced"),
        (REASON_STRUCTURE_DELETED, "Structure Deleted"),
        (REASON_UNASSIGNED, "Fee Unassigned"),
        (REASON_AUTO_APPLIED, "Auto-applied to Fee"),
    ]

    CREDIT_REASONS = (
        REASON_OVERPAYMENT,
        REASON_FEE_REDUCED,
        REASON_STRUCTURE_DELETED,
        REASON_UNASSIGNED,
    )
    DEBIT_REASONS = (REASON_AUTO_APPLIED,)

    student_profile = models.ForeignKey(
        StudentProfile,
        on_delete=models.CASCADE,
        related_name="wallet_entries",
        db_index=True,
    )
    student_fee = models.ForeignKey(
        "fees.StudentFee",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="wallet_entries",
    )
    fee_transaction = models.ForeignKey(
        "payments.FeeTransaction",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="wallet_entries",
    )
    amount_delta = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Positive for credits, negative for debits",
    )
    balance_after = models.DecimalField(max_digits=12, decimal_places=2)
    reason = models.CharField(max_length=50, choices=REASON_CHOICES, db_index=True)
    note = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "wallet_entries"
        verbose_name = "Wallet Entry"
        verbose_name_plural = "Wallet Entries"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["student_profile", "created_at"], name="wallet_ent_student_created_idx"),
        ]

    def __str__(self):
        return f"{self.student_profile_id} {self.reason} {self.amount_delta}"
