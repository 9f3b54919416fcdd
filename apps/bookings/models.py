# apps/bookings/models.py
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Booking(models.Model):
    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        CONFIRMED = 'confirmed', 'Confirmed'
        COMPLETED = 'completed', 'Completed'
        CANCELLED = 'cancelled', 'Cancelled'

    TRANSITIONS = {
        Status.PENDING: {Status.CONFIRMED, Status.CANCELLED},
        Status.CONFIRMED: {Status.COMPLETED, Status.CANCELLED},
        Status.COMPLETED: set(),
        Status.CANCELLED: set(),
    }

    # Timestamp stamped when a booking enters each status
    STATUS_TIMESTAMPS = {
        Status.CONFIRMED: 'confirmed_at',
        Status.COMPLETED: 'completed_at',
        Status.CANCELLED: 'cancelled_at',
    }

    client = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='client_bookings')
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='student_bookings')

    date = models.DateTimeField()
    hours = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('1'))],
    )
    description = models.TextField()
    hourly_rate = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
    )
    total_amount = models.DecimalField(max_digits=10, decimal_places=2, editable=False)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['client', 'status'], name='booking_client_status_idx'),
            models.Index(fields=['student', 'status'], name='booking_student_status_idx'),
            models.Index(fields=['date'], name='booking_date_idx'),
        ]

    def __str__(self):
        return f"{self.client} → {self.student} @ {self.date:%Y-%m-%d} ({self.get_status_display()})"

    def save(self, *args, **kwargs):
        # Fixed at creation; later rate or hours edits never change it
        if self._state.adding and self.total_amount is None:
            self.total_amount = self.compute_total(self.hourly_rate, self.hours)
        super().save(*args, **kwargs)

    @staticmethod
    def compute_total(hourly_rate, hours):
        return (Decimal(str(hourly_rate)) * Decimal(str(hours))).quantize(Decimal('0.01'))

    @classmethod
    def total_fits(cls, total):
        field = cls._meta.get_field('total_amount')
        return total.adjusted() < field.max_digits - field.decimal_places

    def can_transition_to(self, new_status):
        return new_status in self.TRANSITIONS[self.status]

    def is_party(self, user):
        return user.id in (self.client_id, self.student_id)
