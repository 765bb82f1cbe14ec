"""
Fee transaction log (receipts).
"""
import secrets

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from accounts.models import User
from fees.models import StudentFee
from students.models import StudentProfile


def generate_transaction_id(prefix='TXN'):
    """Human-readable receipt number: TXN-<yyyymmddHHMMSS>-<6 hex>."""
    stamp = timezone.now().strftime('%Y%m%d%H%M%S')
    return f"{prefix}-{stamp}-{secrets.token_hex(3).upper()}"


class FeeTransaction(models.Model):
    """
    Money received. amount is the full amount handed over; applied_amount and
    wallet_amount record how it was split between the bill and the wallet.
    student_fee is cleared (not the row deleted) when its bill goes away.
    """
    METHOD_CASH = 'cash'
    METHOD_CARD = 'card'
    METHOD_UPI = 'upi'
    METHOD_BANK_TRANSFER = 'bank_transfer'
    METHOD_CHEQUE = 'cheque'
    METHOD_WALLET = 'wallet'

    METHOD_CHOICES = [
        (METHOD_CASH, 'Cash'),
        (METHOD_CARD, 'Card'),
        (METHOD_UPI, 'UPI'),
        (METHOD_BANK_TRANSFER, 'Bank Transfer'),
        (METHOD_CHEQUE, 'Cheque'),
        (METHOD_WALLET, 'Wallet (auto-applied)'),
    ]
    COLLECTABLE_METHODS = (METHOD_CASH, METHOD_CARD, METHOD_UPI, METHOD_BANK_TRANSFER, METHOD_CHEQUE)

    STATUS_SUCCESS = 'success'
    STATUS_FAILED = 'failed'
    STATUS_PENDING = 'pending'

    STATUS_CHOICES = [
        (STATUS_SUCCESS, 'Success'),
        (STATUS_FAILED, 'Failed'),
        (STATUS_PENDING, 'Pending'),
    ]

    transaction_id = models.CharField(max_length=50, unique=True)
    student_fee = models.ForeignKey(
        StudentFee,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='transactions',
    )
    student_profile = models.ForeignKey(
        StudentProfile,
        on_delete=models.PROTECT,
        related_name='fee_transactions',
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(0.01)],
    )
    applied_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    wallet_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    method = models.CharField(max_length=20, choices=METHOD_CHOICES, default=METHOD_CASH)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_SUCCESS, db_index=True)
    paid_at = models.DateTimeField(default=timezone.now, db_index=True)
    collected_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='collected_fee_transactions',
    )
    remarks = models.TextField(blank=True, default='')
    idempotency_key = models.CharField(max_length=100, unique=True, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'fee_transactions'
        verbose_name = 'Fee Transaction'
        verbose_name_plural = 'Fee Transactions'
        ordering = ['-paid_at', '-id']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name='fee_transaction_amount_positive',
            ),
        ]
        indexes = [
            models.Index(fields=['student_profile', 'paid_at'], name='fee_txn_student_paid_idx'),
        ]

    def __str__(self):
        return f"{self.transaction_id} - {self.student_profile_id} - {self.amount}"

    def save(self, *args, **kwargs):
        """Generate transaction id if not provided"""
        if not self.transaction_id:
            prefix = 'TXN-AUTO' if self.method == self.METHOD_WALLET else 'TXN'
            self.transaction_id = generate_transaction_id(prefix)
        super().save(*args, **kwargs)
