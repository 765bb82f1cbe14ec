"""
Admin configuration for fees app
"""
from django.contrib import admin
from .models import FeeCategory, FeeStructure, StudentFee


@admin.register(FeeCategory)
class FeeCategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name']
    ordering = ['name']


@admin.register(FeeStructure)
class FeeStructureAdmin(admin.ModelAdmin):
    """Amount and due date are read-only here: edits must go through the API so they reach every bill."""
    list_display = ['title', 'school_class', 'category', 'amount', 'due_date', 'is_active']
    list_filter = ['is_active', 'category', 'school_class']
    search_fields = ['title', 'school_class__name', 'category__name']
    readonly_fields = ['amount', 'due_date', 'created_at', 'updated_at']
    ordering = ['due_date']

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StudentFee)
class StudentFeeAdmin(admin.ModelAdmin):
    list_display = ['student_profile', 'fee_structure', 'total_payable', 'paid_amount', 'due_amount', 'status', 'due_date']
    list_filter = ['status', 'school_class', 'academic_year']
    search_fields = ['student_profile__user__email', 'student_profile__user__full_name', 'fee_structure__title']
    readonly_fields = [f.name for f in StudentFee._meta.fields]
    ordering = ['due_date']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
