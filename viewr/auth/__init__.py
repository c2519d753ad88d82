"""
Service Auth de Viewr : plans d'abonnement
"""

from .app import create_auth_app
from .handlers import build_registry
from .models import Plan

__all__ = ["create_auth_app", "build_registry", "Plan"]
