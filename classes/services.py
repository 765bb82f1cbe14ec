"""
Class services - the class/cohort lookups the fee ledger depends on.
Single source of truth for class membership queries.
"""
from core.exceptions import NotFoundError
from .models import SchoolClass, ClassEnrollment


def get_class(class_id):
    """Return the SchoolClass or raise NotFoundError."""
    try:
        return SchoolClass.objects.get(pk=class_id)
    except (SchoolClass.DoesNotExist, ValueError, TypeError):
        raise NotFoundError('Class not found')


def get_active_enrollments_for_class(school_class):
    """
    Canonical queryset: students in class (active membership, not soft-deleted).
    """
    return ClassEnrollment.objects.filter(
        school_class=school_class,
        active=True,
        left_at__isnull=True,
        student_profile__is_deleted=False,
    ).select_related('student_profile__user')


def list_student_ids_in_class(school_class):
    return list(
        get_active_enrollments_for_class(school_class)
        .order_by('student_profile_id')
        .values_list('student_profile_id', flat=True)
    )
