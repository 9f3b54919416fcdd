# apps/messaging/socket.py

import logging

import socketio
from asgiref.sync import async_to_sync
from channels.db import database_sync_to_async
from django.contrib.auth import get_user_model
from rest_framework.exceptions import APIException
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

from . import services
from .serializers import MessageSerializer

logger = logging.getLogger(__name__)
User = get_user_model()

sio = socketio.AsyncServer(async_mode='asgi', cors_allowed_origins="*")


def user_room(user_id):
    return f"user_{user_id}"


# --- Database helpers ---
@database_sync_to_async
def get_user_by_id(user_id):
    return User.objects.get(id=user_id, is_active=True)


@database_sync_to_async
def save_message(conversation_id, sender, content):
    message = services.post_message(conversation_id, sender, content)
    return message, MessageSerializer(message).data


# --- Fan-out ---
async def emit_message(payload, sender_id, recipient_id):
    """Push a stored message to the recipient and echo it to the sender's sockets."""
    await sio.emit('new_message', {**payload, 'is_send_by_me': False}, room=user_room(recipient_id))
    await sio.emit('message_sent', {**payload, 'is_send_by_me': True}, room=user_room(sender_id))


def broadcast_message(message):
    """Sync entry point used by the REST views once the message is committed."""
    payload = MessageSerializer(message).data
    recipient_id = message.conversation.other_party_id(message.sender)
    async_to_sync(emit_message)(payload, message.sender_id, recipient_id)


# --- Socket.IO events ---
@sio.event
async def connect(sid, environ, auth):
    token = auth.get('token') if auth else None
    if not token:
        return False

    try:
        payload = AccessToken(token.replace("Bearer ", ""))
        user = await get_user_by_id(int(payload['user_id']))
    except (TokenError, KeyError, ValueError, User.DoesNotExist) as exc:
        logger.info("Socket connection refused: %s", exc)
        return False

    await sio.save_session(sid, {'user_id': user.id})
    await sio.enter_room(sid, user_room(user.id))
    logger.info("Socket connected: user %s (%s)", user.id, sid)
    return True


@sio.event
async def send_message(sid, data):
    session = await sio.get_session(sid)
    user_id = session.get('user_id')
    if not user_id:
        return

    conversation_id = (data or {}).get('conversation_id')
    content = (data or {}).get('message', '')
    if not conversation_id:
        await sio.emit('error', {'error': 'conversation_id is required'}, to=sid)
        return

    try:
        sender = await get_user_by_id(user_id)
        message, payload = await save_message(conversation_id, sender, content)
    except APIException as exc:
        await sio.emit('error', {'error': str(exc.detail), 'code': exc.default_code}, to=sid)
        return

    recipient_id = message.conversation.other_party_id(sender)
    await emit_message(payload, sender.id, recipient_id)


@sio.event
async def disconnect(sid):
    logger.info("Socket disconnected: %s", sid)
