# apps/profiles/services.py
"""
Profiles are created lazily: the first read or write for a user makes the
row, so signup never has to know about them.
"""
import logging
from decimal import Decimal, InvalidOperation

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from apps.users.models import Role
from .models import Profile, StudentProfile

logger = logging.getLogger(__name__)
User = get_user_model()


def _get_user(user_id):
    try:
        return User.objects.get(pk=user_id, is_active=True)
    except User.DoesNotExist:
        raise NotFound("User not found")


def _ensure_can_edit(user, actor):
    if user.id != actor.id and not actor.is_admin:
        raise PermissionDenied("Not authorized to update this profile")


def profile_for(user):
    profile, created = Profile.objects.get_or_create(user=user)
    if created:
        logger.info("Profile created for user %s", user.pk)
    return profile


def student_profile_for(user):
    if not user.is_student:
        raise PermissionDenied("Only students have a student profile")
    student_profile, created = StudentProfile.objects.get_or_create(user=user)
    if created:
        logger.info("Student profile created for user %s", user.pk)
    return student_profile


# ========================================
# PUBLIC READS
# ========================================
def get_profile(user_id):
    return profile_for(_get_user(user_id))


def get_student_profile(user_id):
    try:
        return StudentProfile.objects.select_related('user').get(user_id=user_id, user__is_active=True)
    except StudentProfile.DoesNotExist:
        raise NotFound("Student profile not found")


# ========================================
# UPDATES (owner or admin)
# ========================================
def update_profile(user_id, actor, data):
    user = _get_user(user_id)
    _ensure_can_edit(user, actor)

    with transaction.atomic():
        profile = profile_for(user)
        for field in ('bio', 'phone', 'location'):
            if field in data:
                setattr(profile, field, (data[field] or '').strip())
        profile.refresh_completion()
        profile.save()

        if 'full_name' in data:
            user.full_name = (data['full_name'] or '').strip()
            user.save(update_fields=['full_name', 'updated_at'])

    profile.user = user
    return profile


def update_student_profile(user_id, actor, data):
    user = _get_user(user_id)
    _ensure_can_edit(user, actor)
    if not user.is_student:
        raise PermissionDenied("Only students can update student profile")

    with transaction.atomic():
        student_profile = student_profile_for(user)
        for field in ('skills', 'categories', 'hourly_rate', 'availability_status'):
            if field in data:
                setattr(student_profile, field, data[field])
        student_profile.refresh_completion()
        student_profile.save()

    return student_profile


def complete_onboarding(user):
    """
    Mark the user's profile complete.

    Students must first have at least one skill and one category.
    """
    try:
        profile = Profile.objects.get(user=user)
    except Profile.DoesNotExist:
        raise NotFound("Profile not found. Please complete step 1 first.")

    if user.is_student:
        try:
            student_profile = StudentProfile.objects.get(user=user)
        except StudentProfile.DoesNotExist:
            raise NotFound("Student profile not found. Please complete step 2 first.")
        if not student_profile.is_student_profile_complete:
            raise ValidationError({"student_profile": "Please complete all required fields in student profile."})

    profile.is_profile_complete = True
    profile.save(update_fields=['is_profile_complete', 'updated_at'])
    logger.info("User %s completed onboarding", user.pk)
    return profile


# ========================================
# SEARCH
# ========================================
def _decimal_param(params, name):
    raw = params.get(name)
    if not raw:
        return None
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise ValidationError({name: "Expected a number"})


def _matches_text(student_profile, needle):
    user = student_profile.user
    profile = getattr(user, 'profile', None)
    haystack = [user.full_name, profile.bio if profile else '']
    haystack.extend(student_profile.skills)
    haystack.extend(student_profile.categories)
    return any(needle in (value or '').lower() for value in haystack)


def search_student_profiles(params):
    """
    Filter student profiles by query parameters.

    availability_status, min_rate, max_rate and location run in SQL; skill,
    category and the free-text search look inside the JSON lists in Python
    so they work the same on SQLite and Postgres.
    """
    queryset = (
        StudentProfile.objects
        .filter(user__role=Role.STUDENT, user__is_active=True)
        .select_related('user', 'user__profile')
        .order_by('-updated_at')
    )

    if params.get('availability_status'):
        queryset = queryset.filter(availability_status=params['availability_status'])
    min_rate = _decimal_param(params, 'min_rate')
    if min_rate is not None:
        queryset = queryset.filter(hourly_rate__gte=min_rate)
    max_rate = _decimal_param(params, 'max_rate')
    if max_rate is not None:
        queryset = queryset.filter(hourly_rate__lte=max_rate)
    if params.get('location'):
        queryset = queryset.filter(user__profile__location__icontains=params['location'])

    results = list(queryset)

    skill = params.get('skill')
    if skill:
        results = [sp for sp in results if skill in sp.skills]
    category = params.get('category')
    if category:
        results = [sp for sp in results if category in sp.categories]
    search = (params.get('search') or '').strip().lower()
    if search:
        results = [sp for sp in results if _matches_text(sp, search)]

    return results
