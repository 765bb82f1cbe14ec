"""
Admin configuration for students app
"""
from django.contrib import admin
from .models import StudentProfile, ParentChild, WalletEntry


@admin.register(StudentProfile)
class StudentProfileAdmin(admin.ModelAdmin):
    """Student Profile Admin. Wallet is read-only: it moves only through ledger operations."""
    list_display = ['user', 'admission_no', 'wallet_balance', 'created_at', 'deleted_at']
    list_filter = ['created_at']
    search_fields = ['user__email', 'user__full_name', 'admission_no']
    readonly_fields = ['wallet_balance', 'created_at', 'updated_at']
    ordering = ['-created_at']


@admin.register(ParentChild)
class ParentChildAdmin(admin.ModelAdmin):
    """Parent-Child Admin"""
    list_display = ['parent', 'student', 'created_at']
    list_filter = ['created_at']
    search_fields = ['parent__email', 'parent__full_name', 'student__email', 'student__full_name']
    readonly_fields = ['created_at']
    ordering = ['-created_at']


@admin.register(WalletEntry)
class WalletEntryAdmin(admin.ModelAdmin):
    list_display = ['student_profile', 'reason', 'amount_delta', 'balance_after', 'student_fee', 'created_at']
    list_filter = ['reason', 'created_at']
    search_fields = ['student_profile__user__email', 'student_profile__user__full_name', 'note']
    readonly_fields = [f.name for f in WalletEntry._meta.fields]
    ordering = ['-created_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
