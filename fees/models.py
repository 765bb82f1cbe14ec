"""
Fee models: category (catalog), structure (class-level rule), student fee (ledger row).
"""
from django.core.validators import MinValueValidator
from django.db import models

from classes.models import SchoolClass
from students.models import StudentProfile


class FeeCategory(models.Model):
    """
    Named class of charge, e.g. TUITION, TRANSPORT.
    name is stored stripped and upper-cased.
    """
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, default='')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'fee_categories'
        verbose_name = 'Fee Category'
        verbose_name_plural = 'Fee Categories'
        ordering = ['name']

    def __str__(self):
        return self.name

    @staticmethod
    def normalize_name(name):
        return (name or '').strip().upper()


class FeeStructure(models.Model):
    """
    Billable rule: a fixed amount of one category, due by a date, for one class.
    Owns the StudentFee rows created by bulk assignment.
    """
    school_class = models.ForeignKey(
        SchoolClass,
        on_delete=models.PROTECT,
        related_name='fee_structures',
    )
    category = models.ForeignKey(
        FeeCategory,
        on_delete=models.PROTECT,
        related_name='structures',
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(0.01)],
        help_text="Base amount billed to every student of the class",
    )
    due_date = models.DateField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'fee_structures'
        verbose_name = 'Fee Structure'
        verbose_name_plural = 'Fee Structures'
        ordering = ['due_date', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['school_class', 'category', 'title'],
                name='unique_fee_structure_class_category_title',
            ),
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name='fee_structure_amount_positive',
            ),
        ]

    def __str__(self):
        return self.title

    @staticmethod
    def build_title(category, school_class):
        return f"{category.name} - {school_class.name} ({school_class.year})"


class StudentFee(models.Model):
    """
    One student's bill for one structure (ledger row).
    total_payable, due_amount and status are stored but only ever written
    by fees.services.ledger.recompute.
    """
    STATUS_UNPAID = 'unpaid'
    STATUS_PARTIAL = 'partial'
    STATUS_PAID = 'paid'
    STATUS_OVERDUE = 'overdue'

    STATUS_CHOICES = [
        (STATUS_UNPAID, 'Unpaid'),
        (STATUS_PARTIAL, 'Partial'),
        (STATUS_PAID, 'Paid'),
        (STATUS_OVERDUE, 'Overdue'),
    ]
    PENDING_STATUSES = (STATUS_UNPAID, STATUS_PARTIAL, STATUS_OVERDUE)

    student_profile = models.ForeignKey(
        StudentProfile,
        on_delete=models.PROTECT,
        related_name='fees',
    )
    school_class = models.ForeignKey(
        SchoolClass,
        on_delete=models.PROTECT,
        related_name='student_fees',
    )
    fee_structure = models.ForeignKey(
        FeeStructure,
        on_delete=models.PROTECT,
        related_name='student_fees',
    )

    base_amount = models.DecimalField(max_digits=12, decimal_places=2)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    fine_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total_payable = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    due_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_UNPAID, db_index=True)
    due_date = models.DateField()
    academic_year = models.CharField(max_length=20)
    remarks = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'student_fees'
        verbose_name = 'Student Fee'
        verbose_name_plural = 'Student Fees'
        ordering = ['due_date', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['student_profile', 'fee_structure'],
                name='unique_student_fee_per_structure',
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(discount_amount__gte=0)
                    & models.Q(fine_amount__gte=0)
                    & models.Q(paid_amount__gte=0)
                    & models.Q(total_payable__gte=0)
                    & models.Q(due_amount__gte=0)
                ),
                name='student_fee_amounts_non_negative',
            ),
        ]
        indexes = [
            models.Index(fields=['student_profile', 'status'], name='student_fee_student_status_idx'),
            models.Index(fields=['school_class', 'status'], name='student_fee_class_status_idx'),
        ]

    def __str__(self):
        return f"{self.student_profile_id} - {self.fee_structure_id} - {self.status}"
