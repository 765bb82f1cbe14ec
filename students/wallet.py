"""
Wallet service: the only code path that changes StudentProfile.wallet_balance.

credit_wallet / debit_wallet lock the student row, move the balance and
write one WalletEntry tagged with a reason code. credit_wallets does the
same for a propagation batch (one lock per student, bulk writes).
Callers that touch several records wrap these in their own atomic block.
"""
import logging
from collections import OrderedDict

from django.db import transaction

from core.exceptions import InvalidInputError, InsufficientWalletBalance, NotFoundError
from core.utils import money, ZERO
from .models import StudentProfile, WalletEntry

logger = logging.getLogger(__name__)


def _lock_student(student_id):
    try:
        return StudentProfile.objects.select_for_update().get(pk=student_id)
    except StudentProfile.DoesNotExist:
        raise NotFoundError(f'Student {student_id} not found')


def _check_amount(amount):
    amount = money(amount)
    if amount <= ZERO:
        raise InvalidInputError('Wallet amount must be greater than 0')
    return amount


def credit_wallet(student_profile, amount, reason, student_fee=None, fee_transaction=None, note=''):
    """Add money to a student's wallet. Returns the WalletEntry."""
    if reason not in WalletEntry.CREDIT_REASONS:
        raise InvalidInputError(f'{reason} is not a wallet credit reason')
    amount = _check_amount(amount)

    with transaction.atomic():
        student = _lock_student(student_profile.pk)
        student.wallet_balance = money(student.wallet_balance) + amount
        student.save(update_fields=['wallet_balance', 'updated_at'])
        entry = WalletEntry.objects.create(
            student_profile=student,
            student_fee=student_fee,
            fee_transaction=fee_transaction,
            amount_delta=amount,
            balance_after=student.wallet_balance,
            reason=reason,
            note=note[:255],
        )

    student_profile.wallet_balance = student.wallet_balance
    logger.info(
        "[WALLET] credit student_id=%s amount=%s reason=%s balance=%s",
        student.pk, amount, reason, student.wallet_balance,
    )
    return entry


def debit_wallet(student_profile, amount, reason, student_fee=None, fee_transaction=None, note=''):
    """Take money out of a student's wallet. Fails rather than going negative."""
    if reason not in WalletEntry.DEBIT_REASONS:
        raise InvalidInputError(f'{reason} is not a wallet debit reason')
    amount = _check_amount(amount)

    with transaction.atomic():
        student = _lock_student(student_profile.pk)
        balance = money(student.wallet_balance)
        if amount > balance:
            raise InsufficientWalletBalance(
                f'Wallet balance {balance} is less than debit {amount}'
            )
        student.wallet_balance = balance - amount
        student.save(update_fields=['wallet_balance', 'updated_at'])
        entry = WalletEntry.objects.create(
            student_profile=student,
            student_fee=student_fee,
            fee_transaction=fee_transaction,
            amount_delta=-amount,
            balance_after=student.wallet_balance,
            reason=reason,
            note=note[:255],
        )

    student_profile.wallet_balance = student.wallet_balance
    logger.info(
        "[WALLET] debit student_id=%s amount=%s reason=%s balance=%s",
        student.pk, amount, reason, student.wallet_balance,
    )
    return entry


def credit_wallets(credits, reason):
    """
    Batch credit for propagation. credits: iterable of dicts with
    student_id, amount, student_fee_id (optional), note (optional).
    Students are locked in id order. Returns the total credited.
    """
    if reason not in WalletEntry.CREDIT_REASONS:
        raise InvalidInputError(f'{reason} is not a wallet credit reason')

    by_student = OrderedDict()
    for credit in sorted(credits, key=lambda c: c['student_id']):
        amount = _check_amount(credit['amount'])
        by_student.setdefault(credit['student_id'], []).append(dict(credit, amount=amount))
    if not by_student:
        return ZERO

    total = ZERO
    with transaction.atomic():
        students = list(
            StudentProfile.objects.select_for_update()
            .filter(pk__in=list(by_student.keys()))
            .order_by('pk')
        )
        if len(students) != len(by_student):
            missing = set(by_student) - {s.pk for s in students}
            raise NotFoundError(f'Students not found: {sorted(missing)}')

        entries = []
        for student in students:
            balance = money(student.wallet_balance)
            for credit in by_student[student.pk]:
                balance += credit['amount']
                total += credit['amount']
                entries.append(WalletEntry(
                    student_profile=student,
                    student_fee_id=credit.get('student_fee_id'),
                    amount_delta=credit['amount'],
                    balance_after=balance,
                    reason=reason,
                    note=(credit.get('note') or '')[:255],
                ))
            student.wallet_balance = balance

        StudentProfile.objects.bulk_update(students, ['wallet_balance'])
        WalletEntry.objects.bulk_create(entries)

    logger.info(
        "[WALLET] batch credit reason=%s students=%s total=%s",
        reason, len(by_student), total,
    )
    return total


def wallet_summary(student_profile, limit=20):
    """Current balance plus the most recent wallet entries."""
    entries = list(
        WalletEntry.objects.filter(student_profile=student_profile)
        .order_by('-created_at', '-id')[:limit]
    )
    return {
        'student_id': student_profile.pk,
        'balance': money(student_profile.wallet_balance),
        'entries': entries,
    }
