# apps/messaging/admin.py
from django.contrib import admin
from .models import Conversation, Message


class MessageInline(admin.TabularInline):
    model = Message
    extra = 0
    fields = ("sender", "content", "is_read", "created_at")
    readonly_fields = ("created_at",)


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ("id", "client", "student", "mission", "last_message_at")
    search_fields = ("client__email", "student__email")
    readonly_fields = ("last_message", "last_message_at", "created_at", "updated_at")
    inlines = [MessageInline]
