"""
Passerelle HTTP de Viewr

Chaque requête métier est routée vers la file RabbitMQ désignée par
l'en-tête ``x-target-queue`` puis traitée en requête/réponse.
"""

from .app import create_gateway_app
from .dependencies import resolve_target_queue
from .facades import ErrorPolicy, GatewayFacade

__all__ = ["create_gateway_app", "resolve_target_queue", "ErrorPolicy", "GatewayFacade"]
