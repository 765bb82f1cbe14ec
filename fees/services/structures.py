"""
Fee structure registry: class-level fee rules.
Amount and due-date edits fan out to ledger rows through propagation.
"""
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from classes.services import get_class
from core.exceptions import ConflictError, InvalidInputError, NotFoundError
from core.utils import money
from fees.models import FeeStructure
from .categories import get_category
from .ledger import clean_amount
from .propagation import cascade_delete_structure, propagate_amount_change, propagate_due_date_change

logger = logging.getLogger(__name__)


def _check_due_date(due_date):
    if due_date is None:
        raise InvalidInputError('dueDate is required')
    if due_date < timezone.localdate():
        raise InvalidInputError('dueDate cannot be in the past')


def create_structure(class_id, category_id, amount, due_date, description=''):
    school_class = get_class(class_id)
    if not school_class.is_active:
        raise InvalidInputError('Class is not active')
    category = get_category(category_id)
    if not category.is_active:
        raise InvalidInputError('Fee category is not active')
    amount = clean_amount(amount, 'amount')
    _check_due_date(due_date)

    title = FeeStructure.build_title(category, school_class)
    if FeeStructure.objects.filter(school_class=school_class, category=category, title=title).exists():
        raise ConflictError('A fee structure for this class and category already exists')

    try:
        with transaction.atomic():
            structure = FeeStructure.objects.create(
                school_class=school_class,
                category=category,
                title=title,
                description=(description or '').strip(),
                amount=amount,
                due_date=due_date,
            )
    except IntegrityError:
        raise ConflictError('A fee structure for this class and category already exists')

    logger.info(
        "[STRUCTURE] created id=%s class_id=%s category=%s amount=%s due_date=%s",
        structure.pk, school_class.pk, category.name, amount, due_date,
    )
    return structure


def update_structure(structure_id, amount=None, due_date=None, title=None, is_active=None, description=None):
    """
    Edit a structure. Returns (structure, propagation summary or None).
    All validation runs before the first write.
    """
    if all(v is None for v in (amount, due_date, title, is_active, description)):
        raise InvalidInputError('Provide at least one field to update')
    if amount is not None:
        amount = clean_amount(amount, 'amount')
    if title is not None:
        title = title.strip()
        if not title:
            raise InvalidInputError('Title cannot be empty')

    propagation = None
    with transaction.atomic():
        try:
            structure = FeeStructure.objects.select_for_update().get(pk=structure_id)
        except (FeeStructure.DoesNotExist, ValueError, TypeError):
            raise NotFoundError('Fee structure not found')

        if due_date is not None and due_date != structure.due_date:
            _check_due_date(due_date)
        if title is not None and title != structure.title:
            clash = FeeStructure.objects.filter(
                school_class_id=structure.school_class_id,
                category_id=structure.category_id,
                title=title,
            ).exclude(pk=structure.pk)
            if clash.exists():
                raise ConflictError('A fee structure with this title already exists')
            structure.title = title

        if amount is not None and amount != money(structure.amount):
            propagation = propagate_amount_change(structure, amount)
            structure.amount = amount
        if due_date is not None and due_date != structure.due_date:
            propagate_due_date_change(structure, due_date)
            structure.due_date = due_date
        if is_active is not None:
            structure.is_active = bool(is_active)
        if description is not None:
            structure.description = description.strip()

        try:
            with transaction.atomic():
                structure.save()
        except IntegrityError:
            raise ConflictError('A fee structure with this title already exists')

    logger.info("[STRUCTURE] updated id=%s amount=%s due_date=%s", structure.pk, structure.amount, structure.due_date)
    return structure, propagation


def delete_structure(structure_id):
    with transaction.atomic():
        try:
            structure = FeeStructure.objects.select_for_update().get(pk=structure_id)
        except (FeeStructure.DoesNotExist, ValueError, TypeError):
            raise NotFoundError('Fee structure not found')
        return cascade_delete_structure(structure)


def list_structures_for_class(class_id):
    school_class = get_class(class_id)
    return (
        FeeStructure.objects.filter(school_class=school_class)
        .select_related('category', 'school_class')
        .order_by('due_date', 'id')
    )
