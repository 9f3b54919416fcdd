# apps/messaging/serializers.py
from rest_framework import serializers

from apps.users.serializers import UserSummarySerializer
from .models import Conversation, Message


class ConversationSerializer(serializers.ModelSerializer):
    client = UserSummarySerializer(read_only=True)
    student = UserSummarySerializer(read_only=True)
    mission_id = serializers.IntegerField(read_only=True, allow_null=True)
    other_user_id = serializers.SerializerMethodField()
    unread_count = serializers.SerializerMethodField()

    class Meta:
        model = Conversation
        fields = [
            'id',
            'client',
            'student',
            'mission_id',
            'other_user_id',
            'last_message',
            'last_message_at',
            'unread_count',
            'created_at',
            'updated_at',
        ]

    def _viewer(self):
        request = self.context.get('request')
        return request.user if request else None

    def get_other_user_id(self, obj):
        viewer = self._viewer()
        if viewer is None or not obj.is_party(viewer):
            return None
        return obj.other_party_id(viewer)

    def get_unread_count(self, obj):
        count = getattr(obj, 'unread_count', None)
        if count is not None:
            return count
        viewer = self._viewer()
        if viewer is None:
            return 0
        return obj.messages.filter(is_read=False).exclude(sender=viewer).count()


class MessageSerializer(serializers.ModelSerializer):
    sender = UserSummarySerializer(read_only=True)
    conversation_id = serializers.IntegerField(read_only=True)
    is_send_by_me = serializers.SerializerMethodField()

    class Meta:
        model = Message
        fields = (
            'id',
            'conversation_id',
            'sender',
            'content',
            'is_read',
            'read_at',
            'created_at',
            'is_send_by_me',
        )

    def get_is_send_by_me(self, obj):
        request = self.context.get("request")
        return obj.sender_id == request.user.id if request else False


class ConversationCreateSerializer(serializers.Serializer):
    student_id = serializers.IntegerField(required=False)
    client_id = serializers.IntegerField(required=False)
    mission_id = serializers.IntegerField(required=False, allow_null=True)


class MessageCreateSerializer(serializers.Serializer):
    content = serializers.CharField(max_length=5000, allow_blank=True, trim_whitespace=False)
