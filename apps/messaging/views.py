# apps/messaging/views.py
from django.db import transaction
from rest_framework import generics, permissions, status
from rest_framework.response import Response

from . import services
from .serializers import (
    ConversationSerializer,
    ConversationCreateSerializer,
    MessageSerializer,
    MessageCreateSerializer,
)
from .socket import broadcast_message


class ConversationListCreateView(generics.ListCreateAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = ConversationSerializer

    def get_queryset(self):
        return services.conversations_for(self.request.user, self.request.query_params.get('sort'))

    def list(self, request, *args, **kwargs):
        conversations = self.get_serializer(self.get_queryset(), many=True).data
        return Response({
            "success": True,
            "data": conversations,
            "count": len(conversations),
        })

    def create(self, request, *args, **kwargs):
        serializer = ConversationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        counterpart_id = data.get('client_id') if request.user.is_student else data.get('student_id')
        conversation, created = services.get_or_create_conversation(
            request.user, counterpart_id, data.get('mission_id')
        )

        return Response({
            "success": True,
            "data": self.get_serializer(conversation).data,
        }, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


class ConversationDetailView(generics.RetrieveAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = ConversationSerializer

    def retrieve(self, request, pk):
        conversation = services.get_conversation_for(pk, request.user)
        return Response({
            "success": True,
            "data": self.get_serializer(conversation).data,
        })


class ConversationMessagesView(generics.ListCreateAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = MessageSerializer

    def list(self, request, pk):
        # Reading marks the other party's messages as read
        conversation, messages = services.fetch_messages(pk, request.user)

        return Response({
            "success": True,
            "conversation_id": conversation.id,
            "data": self.get_serializer(messages, many=True).data,
            "count": len(messages),
        })

    def create(self, request, pk):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        message = services.post_message(pk, request.user, serializer.validated_data['content'])
        transaction.on_commit(lambda: broadcast_message(message), robust=True)

        return Response({
            "success": True,
            "message": "Message sent successfully",
            "data": self.get_serializer(message).data,
        }, status=status.HTTP_201_CREATED)
