"""
Propagation engine: pushes structure-level changes into every StudentFee
row of the structure and moves surplus money into student wallets.

Every entry point runs in one transaction.atomic() block. Ledger rows are
locked in id order first, then students (inside students.wallet).
A database failure in the middle of a batch rolls the whole batch back and
surfaces as PropagationError.
"""
import logging

from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from classes.services import get_class, list_student_ids_in_class
from core.exceptions import ConflictError, InvalidInputError, LedgerError, NotFoundError, PropagationError
from core.utils import money, append_remark, ZERO
from fees.models import FeeStructure, StudentFee
from payments.services import record_wallet_application, unlink_transactions
from students.models import StudentProfile, WalletEntry
from students.wallet import credit_wallet, credit_wallets, debit_wallet
from .ledger import lock_student_fee, recompute

logger = logging.getLogger(__name__)

LEDGER_UPDATE_FIELDS = [
    'base_amount', 'paid_amount', 'total_payable', 'due_amount',
    'status', 'due_date', 'remarks', 'updated_at',
]


def _lock_structure_rows(structure):
    return list(
        StudentFee.objects.select_for_update()
        .filter(fee_structure=structure)
        .order_by('pk')
    )


def _propagation_failed(structure, rows, current, exc):
    failed = [current.pk] if current is not None else [r.pk for r in rows]
    logger.exception(
        "[PROPAGATE] failed structure_id=%s failed_ledger_ids=%s: %s",
        structure.pk, failed, exc,
    )
    return PropagationError(
        f'Propagation for fee structure {structure.pk} failed; no ledger rows were changed.',
        structure_id=structure.pk,
        failed_ledger_ids=failed,
    )


@transaction.atomic
def propagate_amount_change(structure, new_amount, today=None):
    """
    Rebase every row of the structure on new_amount. Where paid now exceeds
    the new total, the difference goes to the wallet (FEE_REDUCED) and paid
    is capped at the total. Does not save the structure itself.
    """
    today = today or timezone.localdate()
    old_amount = money(structure.amount)
    new_amount = money(new_amount)
    rows = _lock_structure_rows(structure)
    credits = []
    current = None
    now = timezone.now()

    try:
        with transaction.atomic():
            for row in rows:
                current = row
                row.base_amount = new_amount
                new_total = max(ZERO, new_amount + money(row.fine_amount) - money(row.discount_amount))
                paid = money(row.paid_amount)
                if paid > new_total:
                    surplus = paid - new_total
                    row.paid_amount = new_total
                    credits.append({
                        'student_id': row.student_profile_id,
                        'amount': surplus,
                        'student_fee_id': row.pk,
                        'note': f'{structure.title}: fee reduced {old_amount} -> {new_amount}',
                    })
                    logger.debug("[PROPAGATE] student_fee_id=%s surplus=%s", row.pk, surplus)
                recompute(row, today)
                row.remarks = append_remark(row.remarks, f'Fee adjusted: {old_amount} -> {new_amount}')
                row.updated_at = now
            current = None

            if rows:
                StudentFee.objects.bulk_update(rows, LEDGER_UPDATE_FIELDS)
            credited = credit_wallets(credits, WalletEntry.REASON_FEE_REDUCED) if credits else ZERO
    except LedgerError:
        raise
    except DatabaseError as exc:
        raise _propagation_failed(structure, rows, current, exc)

    logger.info(
        "[PROPAGATE] structure_id=%s amount %s -> %s rows=%s wallet_credits=%s total_credited=%s",
        structure.pk, old_amount, new_amount, len(rows), len(credits), credited,
    )
    return {
        'updated': len(rows),
        'wallet_credits': len(credits),
        'total_credited': credited,
    }


@transaction.atomic
def propagate_due_date_change(structure, new_due_date, today=None):
    """Copy the structure's new due date onto its rows and re-derive status."""
    today = today or timezone.localdate()
    rows = _lock_structure_rows(structure)
    now = timezone.now()
    current = None
    try:
        with transaction.atomic():
            for row in rows:
                current = row
                row.due_date = new_due_date
                recompute(row, today)
                row.remarks = append_remark(row.remarks, f'Due date changed to {new_due_date.isoformat()}')
                row.updated_at = now
            current = None
            if rows:
                StudentFee.objects.bulk_update(rows, LEDGER_UPDATE_FIELDS)
    except DatabaseError as exc:
        raise _propagation_failed(structure, rows, current, exc)

    logger.info(
        "[PROPAGATE] structure_id=%s due_date -> %s rows=%s",
        structure.pk, new_due_date, len(rows),
    )
    return len(rows)


@transaction.atomic
def cascade_delete_structure(structure):
    """
    Delete a structure and its rows. Whatever was paid on a row is credited
    to the student's wallet (STRUCTURE_DELETED); the row's transactions are
    kept with their ledger reference cleared.
    """
    rows = _lock_structure_rows(structure)
    row_ids = [row.pk for row in rows]
    credits = [
        {
            'student_id': row.student_profile_id,
            'amount': money(row.paid_amount),
            'student_fee_id': row.pk,
            'note': f'{structure.title} deleted',
        }
        for row in rows
        if money(row.paid_amount) > ZERO
    ]
    structure_id = structure.pk
    title = structure.title

    try:
        with transaction.atomic():
            refunded = credit_wallets(credits, WalletEntry.REASON_STRUCTURE_DELETED) if credits else ZERO
            relinked = unlink_transactions(row_ids, 'Fee structure deleted. Amount credited to wallet.')
            StudentFee.objects.filter(pk__in=row_ids).delete()
            structure.delete()
    except LedgerError:
        raise
    except DatabaseError as exc:
        raise _propagation_failed(structure, rows, None, exc)

    logger.info(
        "[CASCADE] structure_id=%s title=%s rows_deleted=%s refunds=%s total_refunded=%s transactions_relinked=%s",
        structure_id, title, len(row_ids), len(credits), refunded, relinked,
    )
    return {
        'structure_id': structure_id,
        'deleted_fees': len(row_ids),
        'refunded_students': len(credits),
        'total_refunded': refunded,
        'relinked_transactions': relinked,
    }


def assign_structure_to_class(class_id, structure_id, collected_by=None, today=None):
    """
    Create one StudentFee per enrolled student that does not have one yet.
    A positive wallet balance is auto-applied to the new bill (up to base),
    recorded as a wallet-method transaction. Re-running creates nothing.
    """
    school_class = get_class(class_id)
    try:
        structure = FeeStructure.objects.get(pk=structure_id)
    except (FeeStructure.DoesNotExist, ValueError, TypeError):
        raise NotFoundError('Fee structure not found')
    if structure.school_class_id != school_class.pk:
        raise InvalidInputError('Fee structure does not belong to this class')
    if not structure.is_active:
        raise InvalidInputError('Fee structure is not active')

    student_ids = list_student_ids_in_class(school_class)
    if not student_ids:
        raise NotFoundError('No students found in this class')

    today = today or timezone.localdate()
    created = []
    auto_applied = 0
    total_applied = ZERO

    try:
        with transaction.atomic():
            # Serializes with concurrent update/delete of the same structure.
            structure = FeeStructure.objects.select_for_update().get(pk=structure.pk)
            base = money(structure.amount)
            existing = set(
                StudentFee.objects.filter(fee_structure=structure, student_profile_id__in=student_ids)
                .values_list('student_profile_id', flat=True)
            )
            missing = [sid for sid in student_ids if sid not in existing]
            students = list(
                StudentProfile.objects.select_for_update()
                .filter(pk__in=missing)
                .order_by('pk')
            )

            for student in students:
                wallet = money(student.wallet_balance)
                auto = min(wallet, base) if wallet > ZERO else ZERO
                row = StudentFee(
                    student_profile=student,
                    school_class=school_class,
                    fee_structure=structure,
                    base_amount=base,
                    paid_amount=auto,
                    due_date=structure.due_date,
                    academic_year=school_class.year,
                    remarks=f'Auto-paid {auto} from wallet' if auto > ZERO else '',
                )
                recompute(row, today)
                row.save()
                created.append(row)

                if auto > ZERO:
                    txn = record_wallet_application(row, auto, collected_by=collected_by)
                    debit_wallet(
                        student, auto, WalletEntry.REASON_AUTO_APPLIED,
                        student_fee=row, fee_transaction=txn, note=structure.title,
                    )
                    auto_applied += 1
                    total_applied += auto
                    logger.debug("[ASSIGN] student_id=%s auto_applied=%s", student.pk, auto)
    except IntegrityError:
        logger.warning("[ASSIGN] concurrent assignment structure_id=%s class_id=%s", structure_id, class_id)
        raise ConflictError('Fee structure was assigned concurrently; retry the request')

    logger.info(
        "[ASSIGN] structure_id=%s class_id=%s created=%s skipped=%s auto_applied=%s total_applied=%s",
        structure.pk, school_class.pk, len(created), len(student_ids) - len(created),
        auto_applied, total_applied,
    )
    return {
        'created': len(created),
        'skipped': len(student_ids) - len(created),
        'auto_applied_students': auto_applied,
        'total_auto_applied': total_applied,
        'student_fees': created,
    }


@transaction.atomic
def unassign_fee(student_fee_id):
    """Remove one bill. Paid money goes to the wallet (UNASSIGNED)."""
    row = lock_student_fee(student_fee_id)
    paid = money(row.paid_amount)
    student = row.student_profile
    if paid > ZERO:
        credit_wallet(
            student, paid, WalletEntry.REASON_UNASSIGNED,
            student_fee=row, note=f'{row.fee_structure.title} unassigned',
        )
    relinked = unlink_transactions([row.pk], 'Fee unassigned. Amount credited to wallet.')
    row_id = row.pk
    row.delete()

    logger.info(
        "[UNASSIGN] student_fee_id=%s student_id=%s credited=%s transactions_relinked=%s",
        row_id, student.pk, paid, relinked,
    )
    return {
        'student_fee_id': row_id,
        'student_id': student.pk,
        'credited': paid,
        'relinked_transactions': relinked,
    }
