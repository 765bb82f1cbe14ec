"""
Fee catalog: named fee categories (TUITION, TRANSPORT, ...).
"""
import logging

from django.db import IntegrityError, transaction

from core.exceptions import ConflictError, InvalidInputError, NotFoundError
from fees.models import FeeCategory, FeeStructure

logger = logging.getLogger(__name__)


def get_category(category_id):
    try:
        return FeeCategory.objects.get(pk=category_id)
    except (FeeCategory.DoesNotExist, ValueError, TypeError):
        raise NotFoundError('Fee category not found')


def list_categories():
    return FeeCategory.objects.all().order_by('name')


def create_category(name, description=''):
    name = FeeCategory.normalize_name(name)
    if not name:
        raise InvalidInputError('Name is required')
    if FeeCategory.objects.filter(name=name).exists():
        raise ConflictError('Fee category already exists')
    try:
        with transaction.atomic():
            category = FeeCategory.objects.create(name=name, description=(description or '').strip())
    except IntegrityError:
        raise ConflictError('Fee category already exists')
    logger.info("[CATEGORY] created id=%s name=%s", category.pk, category.name)
    return category


def update_category(category_id, name=None, description=None, is_active=None):
    category = get_category(category_id)
    if name is not None:
        name = FeeCategory.normalize_name(name)
        if not name:
            raise InvalidInputError('Name cannot be empty')
        if FeeCategory.objects.filter(name=name).exclude(pk=category.pk).exists():
            raise ConflictError('Fee category already exists')
        category.name = name
    if description is not None:
        category.description = description.strip()
    if is_active is not None:
        category.is_active = bool(is_active)
    try:
        with transaction.atomic():
            category.save()
    except IntegrityError:
        raise ConflictError('Fee category already exists')
    return category


def delete_category(category_id):
    category = get_category(category_id)
    if FeeStructure.objects.filter(category=category).exists():
        raise ConflictError('Cannot delete: this fee category is used in fee structures')
    category.delete()
    logger.info("[CATEGORY] deleted id=%s", category_id)
