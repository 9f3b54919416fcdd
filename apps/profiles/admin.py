# apps/profiles/admin.py
from django.contrib import admin
from .models import Profile, StudentProfile


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "location", "is_profile_complete", "updated_at")
    list_filter = ("is_profile_complete",)
    search_fields = ("user__email", "user__full_name", "location")


@admin.register(StudentProfile)
class StudentProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "hourly_rate", "availability_status", "is_student_profile_complete")
    list_filter = ("availability_status", "is_student_profile_complete")
    search_fields = ("user__email", "user__full_name")
