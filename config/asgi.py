# config/asgi.py
"""
ASGI entry point: Socket.IO traffic on /socket.io/, everything else to Django.
"""
import os

import django
import socketio
from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')
django.setup()

# Models must be loaded before the socket handlers import them
from apps.messaging.socket import sio  # noqa: E402

application = socketio.ASGIApp(
    sio,
    other_asgi_app=get_asgi_application(),
    socketio_path='socket.io',
)
