"""
Student ledger: the derivation rule and per-row operations.

derive() is the only place total/due/status are computed. Every operation
that changes base, discount, fine or paid amounts calls recompute() before
saving; nothing recomputes on save implicitly.
"""
import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from core.exceptions import InvalidInputError, NotFoundError
from core.utils import money, append_remark, ZERO
from fees.models import StudentFee

logger = logging.getLogger(__name__)


def derive(base_amount, discount_amount, fine_amount, paid_amount, due_date, today):
    """
    Pure derivation: returns (total_payable, due_amount, status).

    total = max(0, base + fine - discount)
    due   = max(0, total - paid)
    status: paid if nothing due, else overdue past the due date,
    else partial if anything was paid, else unpaid.
    """
    total = max(ZERO, money(base_amount) + money(fine_amount) - money(discount_amount))
    paid = money(paid_amount)
    due = max(ZERO, total - paid)

    if due == ZERO:
        status = StudentFee.STATUS_PAID
    elif due_date is not None and today > due_date:
        status = StudentFee.STATUS_OVERDUE
    elif paid > ZERO:
        status = StudentFee.STATUS_PARTIAL
    else:
        status = StudentFee.STATUS_UNPAID
    return total, due, status


def recompute(student_fee, today=None):
    """Write the derived fields onto a StudentFee instance (not saved)."""
    today = today or timezone.localdate()
    total, due, status = derive(
        student_fee.base_amount,
        student_fee.discount_amount,
        student_fee.fine_amount,
        student_fee.paid_amount,
        student_fee.due_date,
        today,
    )
    student_fee.total_payable = total
    student_fee.due_amount = due
    student_fee.status = status
    return student_fee


def is_consistent(student_fee, today=None):
    """True when the stored derived fields match the derivation rule."""
    today = today or timezone.localdate()
    total, due, status = derive(
        student_fee.base_amount,
        student_fee.discount_amount,
        student_fee.fine_amount,
        student_fee.paid_amount,
        student_fee.due_date,
        today,
    )
    return (
        money(student_fee.total_payable) == total
        and money(student_fee.due_amount) == due
        and student_fee.status == status
    )


def clean_amount(value, field='amount', allow_zero=False):
    """
    Validate a monetary input: required, 2 decimal places, > 0 (or >= 0),
    and not above FEE_MAX_AMOUNT.
    """
    if value is None or value == '':
        raise InvalidInputError(f'{field} is required')
    try:
        amount = money(value)
    except ValueError:
        raise InvalidInputError(f'{field} must be a number')
    if allow_zero:
        if amount < ZERO:
            raise InvalidInputError(f'{field} cannot be negative')
    elif amount <= ZERO:
        raise InvalidInputError(f'{field} must be greater than 0')
    if amount > settings.FEE_MAX_AMOUNT:
        raise InvalidInputError(f'{field} exceeds the maximum of {settings.FEE_MAX_AMOUNT}')
    return amount


def lock_student_fee(student_fee_id):
    """select_for_update on one ledger row; call inside transaction.atomic()."""
    try:
        return StudentFee.objects.select_for_update().get(pk=student_fee_id)
    except (StudentFee.DoesNotExist, ValueError, TypeError):
        raise NotFoundError('Fee record not found')


def apply_discount_or_fine(student_fee_id, discount_amount=None, fine_amount=None, remarks=None):
    """
    Set discount and/or fine on one bill and re-derive. Moves no money:
    a discount that pushes total below paid leaves paid as is (status paid).
    """
    if discount_amount is None and fine_amount is None and not remarks:
        raise InvalidInputError('Provide discountAmount, fineAmount or remarks')
    if discount_amount is not None:
        discount_amount = clean_amount(discount_amount, 'discountAmount', allow_zero=True)
    if fine_amount is not None:
        fine_amount = clean_amount(fine_amount, 'fineAmount', allow_zero=True)

    with transaction.atomic():
        fee = lock_student_fee(student_fee_id)
        changes = []
        if discount_amount is not None and discount_amount != money(fee.discount_amount):
            changes.append(f'discount {money(fee.discount_amount)} -> {discount_amount}')
            fee.discount_amount = discount_amount
        if fine_amount is not None and fine_amount != money(fee.fine_amount):
            changes.append(f'fine {money(fee.fine_amount)} -> {fine_amount}')
            fee.fine_amount = fine_amount
        if changes:
            fee.remarks = append_remark(fee.remarks, 'Adjusted: ' + ', '.join(changes))
        if remarks:
            fee.remarks = append_remark(fee.remarks, remarks)
        recompute(fee)
        fee.save()

    logger.info(
        "[ADJUST] student_fee_id=%s discount=%s fine=%s total=%s due=%s status=%s",
        fee.pk, fee.discount_amount, fee.fine_amount, fee.total_payable, fee.due_amount, fee.status,
    )
    return fee


def fees_for_student(student_profile):
    return (
        StudentFee.objects.filter(student_profile=student_profile)
        .select_related('fee_structure__category', 'school_class')
        .order_by('due_date', 'id')
    )


def dues_for_class(school_class):
    return (
        StudentFee.objects.filter(school_class=school_class)
        .select_related('student_profile__user', 'fee_structure')
        .order_by('student_profile__user__full_name', 'due_date', 'id')
    )
