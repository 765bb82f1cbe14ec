"""
Fee collection and the transaction log.

collect_fee is the only path that adds to StudentFee.paid_amount from
outside money. Any amount above what is due is recorded on the same
transaction and credited to the student's wallet.
"""
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from core.exceptions import AlreadySettledError, ConflictError, InvalidInputError, NotFoundError
from core.utils import money, append_remark, ZERO
from fees.models import StudentFee
from fees.services.ledger import clean_amount, lock_student_fee, recompute
from students.models import WalletEntry
from students.wallet import credit_wallet
from .models import FeeTransaction

logger = logging.getLogger(__name__)


def _replay(previous, student_fee, amount):
    """Same key: same row and amount returns the first result, anything else conflicts."""
    if previous.student_fee_id != student_fee.pk or money(previous.amount) != amount:
        raise ConflictError('Idempotency key was already used for a different payment')
    logger.info(
        "[COLLECT] replay idempotency_key=%s transaction_id=%s",
        previous.idempotency_key, previous.transaction_id,
    )
    return {
        'transaction': previous,
        'student_fee': student_fee,
        'wallet_credit': money(previous.wallet_amount),
        'replayed': True,
    }


def collect_fee(student_fee_id, amount, method, remarks='', collected_by=None, idempotency_key=None):
    """
    Record a payment against one bill.
    Returns {'transaction', 'student_fee', 'wallet_credit', 'replayed'}.
    """
    amount = clean_amount(amount, 'amount')
    if method not in FeeTransaction.COLLECTABLE_METHODS:
        raise InvalidInputError(
            f'paymentMethod must be one of: {", ".join(FeeTransaction.COLLECTABLE_METHODS)}'
        )
    key = (idempotency_key or '').strip() or None
    remarks = (remarks or '').strip()

    try:
        with transaction.atomic():
            fee = lock_student_fee(student_fee_id)
            if key:
                previous = FeeTransaction.objects.filter(idempotency_key=key).first()
                if previous is not None:
                    return _replay(previous, fee, amount)

            recompute(fee)
            if fee.status == StudentFee.STATUS_PAID:
                raise AlreadySettledError('Fee is already fully paid')

            due = money(fee.due_amount)
            applied = min(amount, due)
            overflow = amount - applied
            if overflow > ZERO:
                remarks = append_remark(remarks, f'Split payment: {applied} to fee, {overflow} to wallet')

            txn = FeeTransaction.objects.create(
                student_fee=fee,
                student_profile_id=fee.student_profile_id,
                amount=amount,
                applied_amount=applied,
                wallet_amount=overflow,
                method=method,
                collected_by=collected_by,
                remarks=remarks,
                idempotency_key=key,
            )

            fee.paid_amount = money(fee.paid_amount) + applied
            recompute(fee)
            fee.save()

            if overflow > ZERO:
                credit_wallet(
                    fee.student_profile, overflow, WalletEntry.REASON_OVERPAYMENT,
                    student_fee=fee, fee_transaction=txn, note=f'Overpayment on {txn.transaction_id}',
                )
    except IntegrityError:
        # Two requests raced on the same idempotency key.
        raise ConflictError('Idempotency key was already used for a different payment')

    logger.info(
        "[COLLECT] transaction_id=%s student_fee_id=%s amount=%s applied=%s to_wallet=%s status=%s",
        txn.transaction_id, fee.pk, amount, applied, overflow, fee.status,
    )
    return {
        'transaction': txn,
        'student_fee': fee,
        'wallet_credit': overflow,
        'replayed': False,
    }


def record_wallet_application(student_fee, amount, collected_by=None):
    """Transaction for wallet money auto-applied to a freshly assigned bill."""
    return FeeTransaction.objects.create(
        student_fee=student_fee,
        student_profile_id=student_fee.student_profile_id,
        amount=amount,
        applied_amount=amount,
        wallet_amount=ZERO,
        method=FeeTransaction.METHOD_WALLET,
        collected_by=collected_by,
        remarks='Auto-applied from student wallet',
    )


def unlink_transactions(student_fee_ids, note):
    """
    Detach transactions from bills that are about to be deleted.
    The transactions stay in the log with their ledger reference cleared.
    """
    if not student_fee_ids:
        return 0
    txns = list(FeeTransaction.objects.filter(student_fee_id__in=student_fee_ids).order_by('pk'))
    now = timezone.now()
    for txn in txns:
        txn.student_fee = None
        txn.remarks = append_remark(txn.remarks, note)
        txn.updated_at = now
    if txns:
        FeeTransaction.objects.bulk_update(txns, ['student_fee', 'remarks', 'updated_at'])
    return len(txns)


def payment_history(student_profile):
    return (
        FeeTransaction.objects.filter(student_profile=student_profile)
        .select_related('student_fee__fee_structure', 'collected_by')
        .order_by('-paid_at', '-id')
    )


def get_receipt(transaction_id):
    try:
        return FeeTransaction.objects.select_related(
            'student_profile__user', 'student_fee__fee_structure__category',
            'student_fee__school_class', 'collected_by',
        ).get(transaction_id=transaction_id)
    except FeeTransaction.DoesNotExist:
        raise NotFoundError('Transaction not found')
