"""
Custom permissions for role-based access
"""
from rest_framework import permissions


class IsAdmin(permissions.BasePermission):
    """Permission check for admin role (fee catalog, ledger mutations, reports)"""

    def has_permission(self, request, view):
        return (
            request.user and
            request.user.is_authenticated and
            request.user.role == 'admin'
        )


class IsAdminStudentOrParent(permissions.BasePermission):
    """
    Role gate for finance read endpoints. Teachers are blocked.
    Per-student ownership is checked in the view with can_view_student_finance.
    """

    def has_permission(self, request, view):
        return (
            request.user and
            request.user.is_authenticated and
            request.user.role in ('admin', 'student', 'parent')
        )


def can_view_student_finance(user, student_profile):
    """
    Admin: any student. Student: only own profile. Parent: only linked children.
    """
    if user.role == 'admin':
        return True
    if user.role == 'student':
        return student_profile.user_id == user.id
    if user.role == 'parent':
        from students.models import ParentChild
        return ParentChild.objects.filter(parent=user, student_id=student_profile.user_id).exists()
    return False
