# apps/missions/admin.py
from django.contrib import admin
from .models import Mission, Application


class ApplicationInline(admin.TabularInline):
    model = Application
    extra = 0
    fields = ("student", "status", "accepted_at", "rejected_at")
    readonly_fields = ("accepted_at", "rejected_at")


@admin.register(Mission)
class MissionAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "client", "category", "budget", "status", "is_remote", "created_at")
    list_filter = ("status", "category", "is_remote")
    search_fields = ("title", "client__email")
    readonly_fields = ("completed_at", "cancelled_at", "created_at", "updated_at")
    inlines = [ApplicationInline]


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ("id", "mission", "student", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("mission__title", "student__email")
    readonly_fields = ("accepted_at", "rejected_at", "created_at", "updated_at")
