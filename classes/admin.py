"""
Admin configuration for classes app
"""
from django.contrib import admin
from .models import SchoolClass, ClassEnrollment


@admin.register(SchoolClass)
class SchoolClassAdmin(admin.ModelAdmin):
    """Class Admin"""
    list_display = ['name', 'year', 'organization', 'is_active', 'created_at']
    list_filter = ['is_active', 'year']
    search_fields = ['name', 'year']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['year', 'name']


@admin.register(ClassEnrollment)
class ClassEnrollmentAdmin(admin.ModelAdmin):
    """Class Enrollment Admin"""
    list_display = ['school_class', 'student_profile', 'active', 'joined_at', 'left_at']
    list_filter = ['active', 'joined_at']
    search_fields = ['school_class__name', 'student_profile__user__email', 'student_profile__user__full_name']
    readonly_fields = ['joined_at']
    ordering = ['-joined_at']
