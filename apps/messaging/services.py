# apps/messaging/services.py
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from apps.missions.services import get_mission
from apps.users.models import Role
from .models import Conversation, Message

logger = logging.getLogger(__name__)
User = get_user_model()


def _get_party(user_id, role, not_found_message):
    try:
        return User.objects.get(pk=user_id, role=role)
    except User.DoesNotExist:
        raise NotFound(not_found_message)


def get_conversation(conversation_id, for_update=False):
    queryset = Conversation.objects.select_for_update() if for_update else Conversation.objects.select_related('client', 'student')
    try:
        return queryset.get(pk=conversation_id)
    except Conversation.DoesNotExist:
        raise NotFound("Conversation not found")


def get_conversation_for(conversation_id, user):
    conversation = get_conversation(conversation_id)
    if not conversation.is_party(user):
        raise PermissionDenied("Not authorized to access this conversation")
    return conversation


def conversations_for(user, sort=None):
    ordering = '-last_message_at' if sort == '-updated_at' else '-created_at'
    return (
        Conversation.objects.filter(Q(client=user) | Q(student=user))
        .select_related('client', 'student')
        .annotate(unread_count=Count(
            'messages',
            filter=Q(messages__is_read=False) & ~Q(messages__sender=user),
        ))
        .order_by(ordering)
    )


def get_or_create_conversation(actor, counterpart_id, mission_id=None):
    """
    Return the conversation for (client, student, mission), creating it once.

    The actor's role decides which side they are on; counterpart_id names the
    other side. Returns (conversation, created).
    """
    if actor.is_student:
        if not counterpart_id:
            raise ValidationError({"client_id": "Client ID is required when creating conversation as student"})
        student = actor
        client = _get_party(counterpart_id, Role.CUSTOMER, "Client not found")
    else:
        if not counterpart_id:
            raise ValidationError({"student_id": "Student ID is required when creating conversation as client"})
        student = _get_party(counterpart_id, Role.STUDENT, "Student not found")
        client = actor

    mission = get_mission(mission_id) if mission_id else None

    # get_or_create re-reads after losing an insert race on the unique constraint
    conversation, created = Conversation.objects.get_or_create(
        client=client,
        student=student,
        mission=mission,
    )
    if created:
        logger.info("Conversation %s opened between client %s and student %s",
                    conversation.pk, client.pk, student.pk)
    return conversation, created


def post_message(conversation_id, sender, content):
    """
    Store a message and refresh the conversation summary in one transaction.
    """
    content = (content or '').strip()
    if not content:
        raise ValidationError({"content": "Message content is required"})

    with transaction.atomic():
        conversation = get_conversation(conversation_id, for_update=True)
        if not conversation.is_party(sender):
            raise PermissionDenied("Not authorized to send messages in this conversation")

        message = Message.objects.create(
            conversation=conversation,
            sender=sender,
            content=content,
        )
        conversation.last_message = message.content
        conversation.last_message_at = message.created_at
        conversation.save(update_fields=['last_message', 'last_message_at', 'updated_at'])

    return message


def fetch_messages(conversation_id, reader):
    """
    Return the conversation's messages oldest first.

    Marks every unread message the reader did not send as read.
    """
    conversation = get_conversation_for(conversation_id, reader)

    marked = (
        Message.objects.filter(conversation=conversation, is_read=False)
        .exclude(sender=reader)
        .update(is_read=True, read_at=timezone.now())
    )
    if marked:
        logger.debug("Marked %s messages read in conversation %s", marked, conversation.pk)

    messages = (
        Message.objects.filter(conversation=conversation)
        .select_related('sender')
        .order_by('created_at', 'id')
    )
    return conversation, list(messages)
