"""
Signals to ensure a StudentProfile (and so a wallet) exists for every student user.
"""
from django.db.models.signals import post_save
from django.dispatch import receiver
from accounts.models import User
from .models import StudentProfile


@receiver(post_save, sender=User)
def ensure_student_profile_exists(sender, instance, created, **kwargs):
    """Create the profile when a User is created or its role changes to student."""
    if instance.role == User.ROLE_STUDENT:
        StudentProfile.objects.get_or_create(user=instance)
