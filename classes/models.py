"""
School class (cohort) and class enrollment.
Fee structures are defined per class; bulk assignment bills every active enrollment.
"""
from django.db import models
from students.models import StudentProfile


class SchoolClass(models.Model):
    """
    Class cohort, e.g. "Grade 5 A" for year "2025-2026".
    year is copied onto ledger rows as their academic year.
    """
    organization = models.ForeignKey(
        'core.Organization',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='school_classes',
        db_column='organization_id',
    )
    name = models.CharField(max_length=255)
    year = models.CharField(max_length=20, help_text="Academic year label, e.g. 2025-2026")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'school_classes'
        verbose_name = 'Class'
        verbose_name_plural = 'Classes'
        ordering = ['year', 'name']
        unique_together = [['organization', 'name', 'year']]

    def __str__(self):
        return f"{self.name} ({self.year})"

    @property
    def student_count(self):
        return self.enrollments.filter(active=True, left_at__isnull=True).count()


class ClassEnrollment(models.Model):
    """
    Class membership. left_at for history.
    """
    school_class = models.ForeignKey(
        SchoolClass,
        on_delete=models.CASCADE,
        related_name='enrollments',
    )
    student_profile = models.ForeignKey(
        StudentProfile,
        on_delete=models.CASCADE,
        related_name='enrollments',
    )
    joined_at = models.DateTimeField(auto_now_add=True)
    left_at = models.DateTimeField(null=True, blank=True)
    active = models.BooleanField(default=True)

    class Meta:
        db_table = 'class_enrollments'
        verbose_name = 'Class Enrollment'
        verbose_name_plural = 'Class Enrollments'
        unique_together = [['school_class', 'student_profile']]
        ordering = ['-joined_at']

    def __str__(self):
        return f"{self.school_class.name} - {self.student_profile.user.full_name}"
