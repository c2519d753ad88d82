"""
Service Notification de Viewr
"""

from .app import create_notification_app
from .handlers import build_registry
from .models import Notification

__all__ = ["create_notification_app", "build_registry", "Notification"]
