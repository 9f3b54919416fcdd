# apps/messaging/models.py
from django.conf import settings
from django.db import models
from django.utils import timezone


class Conversation(models.Model):
    """
    Thread between one customer and one student, optionally about a mission.

    last_message / last_message_at mirror the newest Message and are updated
    in the same transaction as every message insert.
    """
    client = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='client_conversations')
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='student_conversations')
    mission = models.ForeignKey(
        'missions.Mission',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='conversations',
    )
    last_message = models.TextField(blank=True, default='')
    last_message_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            # NULL never equals NULL in a unique index, so the mission-less
            # pairing needs its own constraint.
            models.UniqueConstraint(
                fields=['client', 'student', 'mission'],
                condition=models.Q(mission__isnull=False),
                name='unique_conversation_per_mission',
            ),
            models.UniqueConstraint(
                fields=['client', 'student'],
                condition=models.Q(mission__isnull=True),
                name='unique_conversation_without_mission',
            ),
        ]
        indexes = [
            models.Index(fields=['student', 'client'], name='conversation_student_idx'),
            models.Index(fields=['-last_message_at'], name='conversation_last_msg_idx'),
        ]

    def __str__(self):
        return f"{self.client} ↔ {self.student}"

    def is_party(self, user):
        return user.id in (self.client_id, self.student_id)

    def other_party_id(self, user):
        return self.student_id if user.id == self.client_id else self.client_id


class Message(models.Model):
    conversation = models.ForeignKey(Conversation, on_delete=models.CASCADE, related_name='messages')
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='sent_messages')
    content = models.TextField(max_length=5000)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['conversation', 'created_at'], name='message_conversation_idx'),
        ]

    def __str__(self):
        return f"{self.sender}: {self.content[:30]}"
