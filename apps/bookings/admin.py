# apps/bookings/admin.py
from django.contrib import admin
from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "client", "student", "date", "hours", "hourly_rate", "total_amount", "status")
    list_filter = ("status", "date")
    search_fields = ("client__email", "student__email", "description")
    readonly_fields = ("total_amount", "confirmed_at", "completed_at", "cancelled_at", "created_at", "updated_at")
