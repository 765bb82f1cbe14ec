"""
Admin configuration for payments app
"""
from django.contrib import admin
from .models import FeeTransaction


@admin.register(FeeTransaction)
class FeeTransactionAdmin(admin.ModelAdmin):
    """Fee Transaction Admin. Read-only: receipts are an audit trail."""
    list_display = ['transaction_id', 'student_profile', 'student_fee', 'amount', 'method', 'status', 'paid_at', 'collected_by']
    list_filter = ['status', 'method', 'paid_at']
    search_fields = ['transaction_id', 'student_profile__user__email', 'student_profile__user__full_name']
    readonly_fields = [f.name for f in FeeTransaction._meta.fields]
    ordering = ['-paid_at']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
