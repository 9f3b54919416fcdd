# apps/missions/models.py
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Mission(models.Model):
    class Status(models.TextChoices):
        OPEN = 'open', 'Open'
        IN_DISCUSSION = 'in_discussion', 'In Discussion'
        IN_PROGRESS = 'in_progress', 'In Progress'
        COMPLETED = 'completed', 'Completed'
        CANCELLED = 'cancelled', 'Cancelled'

    # Legal status changes; completed and cancelled are terminal.
    TRANSITIONS = {
        Status.OPEN: {Status.IN_DISCUSSION, Status.IN_PROGRESS, Status.CANCELLED},
        Status.IN_DISCUSSION: {Status.OPEN, Status.IN_PROGRESS, Status.CANCELLED},
        Status.IN_PROGRESS: {Status.COMPLETED, Status.CANCELLED},
        Status.COMPLETED: set(),
        Status.CANCELLED: set(),
    }

    client = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='missions')
    title = models.CharField(max_length=200)
    description = models.TextField(max_length=5000)
    category = models.CharField(max_length=100)
    budget = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
    )
    deadline = models.DateTimeField(null=True, blank=True)
    location = models.CharField(max_length=200, null=True, blank=True)
    is_remote = models.BooleanField(default=False)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.OPEN)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['client', 'status'], name='mission_client_status_idx'),
            models.Index(fields=['status', 'created_at'], name='mission_status_created_idx'),
            models.Index(fields=['category', 'status'], name='mission_category_status_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.get_status_display()})"

    @property
    def is_terminal(self):
        return not self.TRANSITIONS[self.status]

    def can_transition_to(self, new_status):
        return new_status in self.TRANSITIONS[self.status]

    def is_managed_by(self, user):
        return self.client_id == user.id or user.is_admin


class Application(models.Model):
    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        ACCEPTED = 'accepted', 'Accepted'
        REJECTED = 'rejected', 'Rejected'

    mission = models.ForeignKey(Mission, on_delete=models.CASCADE, related_name='applications')
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='applications')
    cover_letter = models.TextField(max_length=2000, blank=True, default='')
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    accepted_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        # One application per student per mission
        unique_together = ('mission', 'student')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['mission', 'status'], name='application_mission_status_idx'),
            models.Index(fields=['student', 'status'], name='application_student_status_idx'),
        ]

    def __str__(self):
        return f"{self.student} → {self.mission.title} ({self.get_status_display()})"
